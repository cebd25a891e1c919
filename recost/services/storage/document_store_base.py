"""
Abstract base class for the cloud document store.

Defines the interface the capture workflow talks to, so the workflow never
knows whether invoices land in the local mock or in a real backend.
"""

from abc import ABC, abstractmethod
from typing import List
from ...models import InvoiceRecord, InvoiceUpload, PendingExternalInvoice, Property, UploadResult


class DocumentStore(ABC):
    """
    Abstract document store (Google Drive + Sheets in production).

    Implementations:
    - LocalDocumentStore: key-value persistence with simulated latency
    - HttpDocumentStore: REST backend that owns the Drive/Sheets credentials
    """

    @abstractmethod
    async def list_properties(self) -> List[Property]:
        """
        List all properties, archived included.

        Implementations seed a default set when nothing is stored yet.
        """
        pass

    @abstractmethod
    async def save_property(self, prop: Property) -> Property:
        """
        Create or replace a property by id.

        New properties get a Drive folder reference; the returned value is
        the property as submitted, so re-list to see the generated reference.
        """
        pass

    @abstractmethod
    async def upload_invoice(self, upload: InvoiceUpload) -> UploadResult:
        """
        Store the scan (if any) and append a sheet row.

        Returns:
            UploadResult with the Drive link (None without a file) and sheet row

        Raises:
            StorageError: if the record could not be persisted
        """
        pass

    @abstractmethod
    def list_recent_invoices(self) -> List[InvoiceRecord]:
        """Committed invoices, newest first"""
        pass

    @abstractmethod
    async def list_pending_external_invoices(self) -> List[PendingExternalInvoice]:
        """Invoices waiting in the KSeF inbox"""
        pass

    @abstractmethod
    async def commit_external_invoice(self, invoice_id: str) -> None:
        """Mark a KSeF invoice as approved so it is no longer listed as pending"""
        pass
