
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from ..deps import get_capture_session, get_current_user
from ...services.workflow import CaptureSession, SessionState

router = APIRouter(prefix="/inbox", tags=["ksef-inbox"], dependencies=[Depends(get_current_user)])


class ChoosePropertyRequest(BaseModel):
    property_id: str


@router.post("/open", response_model=SessionState)
async def open_inbox(session: CaptureSession = Depends(get_capture_session)):
    """Fetch pending KSeF e-invoices and switch to the inbox"""
    await session.open_pending_inbox()
    return session.snapshot()


@router.post("/{invoice_id}/property", response_model=SessionState)
async def choose_property(
    invoice_id: str,
    req: ChoosePropertyRequest,
    session: CaptureSession = Depends(get_capture_session),
):
    session.choose_pending_property(invoice_id, req.property_id)
    return session.snapshot()


@router.post("/{invoice_id}/approve", response_model=SessionState)
async def approve(invoice_id: str, session: CaptureSession = Depends(get_capture_session)):
    """
    Commit one e-invoice to its chosen property.

    The last approval moves the flow to SUCCESS.
    """
    await session.approve_pending(invoice_id)
    return session.snapshot()
