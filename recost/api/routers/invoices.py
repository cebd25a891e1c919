
from fastapi import APIRouter, Depends, File, Request, UploadFile
from ..deps import get_current_user, get_document_store, read_document
from ...models import ExtractedInvoiceData, InvoiceRecord
from ...services.extraction import extract_invoice_data
from ...services.storage import DocumentStore

router = APIRouter(prefix="/invoices", tags=["invoices"], dependencies=[Depends(get_current_user)])


@router.post("/extract", response_model=ExtractedInvoiceData)
async def extract(
    request: Request,
    file: UploadFile = File(None),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Extract invoice fields with Gemini without touching the capture flow.

    The known properties are sent along so the model can suggest which one
    the invoice belongs to. Failures return 400 with a generic message.
    """
    base64_data, mime_type = await read_document(request, file)
    properties = await store.list_properties()
    return await extract_invoice_data(base64_data, mime_type, properties)


@router.get("/recent", response_model=list[InvoiceRecord])
def recent_invoices(include_files: bool = False, store: DocumentStore = Depends(get_document_store)):
    """Committed invoices, newest first"""
    records = store.list_recent_invoices()
    if include_files:
        return records
    return [r.model_copy(update={"file_data": None}) for r in records]
