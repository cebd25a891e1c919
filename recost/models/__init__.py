from .invoice import (
    DEFAULT_CURRENCY,
    DraftUpdate,
    ExtractedInvoiceData,
    InvoiceRecord,
    InvoiceUpload,
    PendingExternalInvoice,
    UploadResult,
)
from .property import NewProperty, Property
from .user import StorageFolders, User, UserRole
