
from fastapi import APIRouter, BackgroundTasks, Depends, File, Request, UploadFile
from pydantic import BaseModel
from ..deps import get_capture_session, get_current_user, read_document
from ...models import DraftUpdate
from ...services.workflow import CaptureSession, SessionState

router = APIRouter(prefix="/capture", tags=["capture"], dependencies=[Depends(get_current_user)])


class SelectPropertyRequest(BaseModel):
    property_id: str | None = None


@router.get("", response_model=SessionState)
async def get_state(session: CaptureSession = Depends(get_capture_session)):
    return session.snapshot()


@router.post("/load", response_model=SessionState)
async def load(action: str | None = None, session: CaptureSession = Depends(get_capture_session)):
    """
    Load properties, history and the KSeF inbox.

    `?action=new` is the deep link that opens straight into method selection.
    """
    await session.load(action)
    return session.snapshot()


@router.post("/start", response_model=SessionState)
async def start(session: CaptureSession = Depends(get_capture_session)):
    session.start()
    return session.snapshot()


@router.post("/file", response_model=SessionState)
async def select_file(
    request: Request,
    file: UploadFile = File(None),
    session: CaptureSession = Depends(get_capture_session),
):
    """
    Analyze a photographed or uploaded invoice.

    Ends in REVIEW on success, or back in SELECT_METHOD with a notification.
    """
    base64_data, mime_type = await read_document(request, file)
    await session.select_file(base64_data, mime_type)
    return session.snapshot()


@router.post("/manual", response_model=SessionState)
async def manual_entry(session: CaptureSession = Depends(get_capture_session)):
    session.manual_entry()
    return session.snapshot()


@router.patch("/draft", response_model=SessionState)
async def update_draft(update: DraftUpdate, session: CaptureSession = Depends(get_capture_session)):
    session.update_draft(update)
    return session.snapshot()


@router.post("/property", response_model=SessionState)
async def select_property(req: SelectPropertyRequest, session: CaptureSession = Depends(get_capture_session)):
    session.select_property(req.property_id)
    return session.snapshot()


@router.post("/submit", response_model=SessionState)
async def submit(session: CaptureSession = Depends(get_capture_session)):
    """Validate and upload the draft; validation_errors lists what is missing"""
    await session.submit()
    return session.snapshot()


@router.post("/reset", response_model=SessionState)
async def reset(background_tasks: BackgroundTasks, session: CaptureSession = Depends(get_capture_session)):
    session.reset()
    # Keeps the dashboard's KSeF counter current
    background_tasks.add_task(session.refresh_pending)
    return session.snapshot()
