
import httpx
from typing import List
from loguru import logger
from .document_store_base import DocumentStore
from ...core.errors import StorageError
from ...models import InvoiceRecord, InvoiceUpload, PendingExternalInvoice, Property, UploadResult

# Talks to a backend service that holds the Google OAuth credentials and
# performs the real Drive upload / Sheets append on our behalf.


class HttpDocumentStore(DocumentStore):
    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _request(self, method: str, path: str, **kwargs):
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.request(method, f"{self.base_url}{path}", **kwargs)
                r.raise_for_status()
                return r.json() if r.content else None
        except httpx.HTTPError as e:
            logger.error(f"Backend request failed: {method} {path}: {str(e)}")
            raise StorageError(f"Backend request failed: {method} {path}: {str(e)}") from e

    async def list_properties(self) -> List[Property]:
        data = await self._request("GET", "/properties")
        return [Property.model_validate(p) for p in data]

    async def save_property(self, prop: Property) -> Property:
        await self._request("PUT", f"/properties/{prop.id}", json=prop.model_dump())
        return prop

    async def upload_invoice(self, upload: InvoiceUpload) -> UploadResult:
        data = await self._request("POST", "/invoices", json=upload.model_dump())
        result = UploadResult.model_validate(data)
        logger.info("Invoice uploaded to backend", sheet_row=result.sheet_row, drive_link=result.drive_link)
        return result

    def list_recent_invoices(self) -> List[InvoiceRecord]:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.get(f"{self.base_url}/invoices")
                r.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Backend request failed: GET /invoices: {str(e)}")
            raise StorageError(f"Backend request failed: GET /invoices: {str(e)}") from e
        return [InvoiceRecord.model_validate(rec) for rec in r.json()]

    async def list_pending_external_invoices(self) -> List[PendingExternalInvoice]:
        data = await self._request("GET", "/ksef/pending")
        return [PendingExternalInvoice.model_validate(i) for i in data]

    async def commit_external_invoice(self, invoice_id: str) -> None:
        await self._request("POST", f"/ksef/{invoice_id}/commit")
