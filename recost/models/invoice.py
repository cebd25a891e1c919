from pydantic import BaseModel, Field, field_validator

DEFAULT_CURRENCY = "PLN"


class ExtractedInvoiceData(BaseModel):
    seller_name: str = ""
    invoice_number: str = ""
    date: str = ""  # ISO date, YYYY-MM-DD
    net_amount: float = 0.0
    vat_amount: float = 0.0
    gross_amount: float | None = 0.0  # None only on an edited draft, rejected by review rules
    currency: str = DEFAULT_CURRENCY
    suggested_property_id: str | None = None


class InvoiceUpload(ExtractedInvoiceData):
    """Payload handed to a DocumentStore when committing an invoice"""
    property_id: str
    file_data: str | None = None  # base64, absent for manual entry
    mime_type: str | None = None


class InvoiceRecord(ExtractedInvoiceData):
    id: str
    property_id: str
    file_data: str | None = None
    file_mime_type: str = ""
    drive_link: str | None = None
    sheet_row: int | None = None


class PendingExternalInvoice(ExtractedInvoiceData):
    """An invoice fetched from the KSeF registry, not yet committed"""
    id: str
    suggested_category: str | None = None


class UploadResult(BaseModel):
    drive_link: str | None = None
    sheet_row: int


class DraftUpdate(BaseModel):
    """Partial edit of the review draft; unset fields are left alone"""
    seller_name: str | None = None
    invoice_number: str | None = None
    date: str | None = None
    net_amount: float | None = Field(default=None, ge=0)
    vat_amount: float | None = Field(default=None, ge=0)
    gross_amount: float | None = Field(default=None, ge=0)
    currency: str | None = None

    # Only gross_amount may be explicitly cleared
    @field_validator("seller_name", "invoice_number", "date", "net_amount", "vat_amount", "currency")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v
