r"""
Capture flow: an explicit state machine plus the application state it drives.

    IDLE -> SELECT_METHOD -> ANALYZING -> REVIEW -> UPLOADING -> SUCCESS
                         \________________/   ^          |
                          (manual entry)       \_________/ (upload failed)
    IDLE -> PENDING_INBOX -> SUCCESS (last e-invoice approved)

Every state may go back to IDLE through reset(). Collaborator failures
(extraction, storage) never escape as exceptions: they become a
`notification` for the user and a stable state to continue from.
"""

import asyncio
import uuid
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional
from loguru import logger
from pydantic import BaseModel
from .extraction import extract_invoice_data, strip_data_url
from .review_rules import SELECT_PROPERTY, validate_review
from .storage.document_store_base import DocumentStore
from ..core.config import settings
from ..core.errors import (
    ExtractionError,
    InvalidStateError,
    InvalidTransitionError,
    PendingInvoiceNotFoundError,
    PropertyNotFoundError,
    RecostError,
    StorageError,
)
from ..models import (
    DraftUpdate,
    ExtractedInvoiceData,
    InvoiceRecord,
    InvoiceUpload,
    PendingExternalInvoice,
    Property,
)

DEEP_LINK_NEW = "new"
KSEF_UNAVAILABLE = "Could not connect to KSeF."
PENDING_SAVE_FAILED = "Could not save the e-invoice."

Extractor = Callable[[str, str, Iterable[Property]], Awaitable[ExtractedInvoiceData]]


class ProcessingStatus(str, Enum):
    IDLE = "IDLE"
    SELECT_METHOD = "SELECT_METHOD"
    ANALYZING = "ANALYZING"
    REVIEW = "REVIEW"
    UPLOADING = "UPLOADING"
    SUCCESS = "SUCCESS"
    PENDING_INBOX = "PENDING_INBOX"


# IDLE is reachable from everywhere and is not listed
TRANSITIONS: Dict[ProcessingStatus, frozenset] = {
    ProcessingStatus.IDLE: frozenset({ProcessingStatus.SELECT_METHOD, ProcessingStatus.PENDING_INBOX}),
    ProcessingStatus.SELECT_METHOD: frozenset({ProcessingStatus.ANALYZING, ProcessingStatus.REVIEW}),
    ProcessingStatus.ANALYZING: frozenset({ProcessingStatus.REVIEW, ProcessingStatus.SELECT_METHOD}),
    ProcessingStatus.REVIEW: frozenset({ProcessingStatus.UPLOADING}),
    ProcessingStatus.UPLOADING: frozenset({ProcessingStatus.SUCCESS, ProcessingStatus.REVIEW}),
    ProcessingStatus.SUCCESS: frozenset(),
    ProcessingStatus.PENDING_INBOX: frozenset({ProcessingStatus.SUCCESS}),
}


def next_status(current: ProcessingStatus, target: ProcessingStatus) -> ProcessingStatus:
    """
    Validate a transition.

    Returns:
        target, if the move is allowed

    Raises:
        InvalidTransitionError: for any move not in the transition table
    """
    if target == ProcessingStatus.IDLE or target in TRANSITIONS[current]:
        return target
    raise InvalidTransitionError(current, target)


class SessionState(BaseModel):
    """Read-only view of a CaptureSession for API clients"""
    status: ProcessingStatus
    properties: List[Property]
    selected_property_id: Optional[str]
    has_file: bool
    file_mime_type: str
    draft: Optional[ExtractedInvoiceData]
    validation_errors: List[str]
    pending_invoices: List[PendingExternalInvoice]
    pending_count: int
    pending_property_selections: Dict[str, str]
    processing_pending_id: Optional[str]
    history: List[InvoiceRecord]
    last_upload_link: Optional[str]
    notification: Optional[str]


class CaptureSession:
    """
    Application state of one user's capture flow.

    The document store and the extractor are injected; the session does not
    know whether it talks to the local mock or a real backend.
    """

    def __init__(
        self,
        store: DocumentStore,
        extractor: Extractor = extract_invoice_data,
        default_currency: str | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.extractor = extractor
        self.default_currency = default_currency or settings.default_currency
        self.today = today

        self.status = ProcessingStatus.IDLE
        self.properties: List[Property] = []
        self.selected_property_id: Optional[str] = None
        self.file_data: Optional[str] = None
        self.file_mime_type = ""
        self.draft: Optional[ExtractedInvoiceData] = None
        self.validation_errors: List[str] = []
        self.pending: List[PendingExternalInvoice] = []
        self.pending_property_selections: Dict[str, str] = {}
        self.processing_pending_id: Optional[str] = None
        self.history: List[InvoiceRecord] = []
        self.last_upload_link: Optional[str] = None
        self.notification: Optional[str] = None

    def _move(self, target: ProcessingStatus):
        previous = self.status
        self.status = next_status(previous, target)
        logger.debug("Capture status changed", previous=previous.value, current=target.value)

    def _require(self, status: ProcessingStatus, action: str):
        if self.status != status:
            raise InvalidStateError(f"{action} requires {status.value}, current status is {self.status.value}")

    def _notify(self, message: str):
        self.notification = message
        logger.info("User notification", message=message, status=self.status.value)

    async def _refresh_history(self):
        try:
            # list_recent_invoices is synchronous and may do blocking I/O
            self.history = await asyncio.to_thread(self.store.list_recent_invoices)
        except StorageError as e:
            logger.warning(f"Could not refresh invoice history: {str(e)}")

    @property
    def active_properties(self) -> List[Property]:
        return [p for p in self.properties if not p.is_archived]

    # Loading and navigation

    async def load(self, action: str | None = None):
        """Fetch properties, history and the inbox; `action` is the deep-link parameter"""
        self.properties = await self.store.list_properties()
        await self._refresh_history()
        await self.refresh_pending()

        active = self.active_properties
        if active and not self.selected_property_id:
            self.selected_property_id = active[0].id

        if action == DEEP_LINK_NEW and self.status == ProcessingStatus.IDLE:
            self._move(ProcessingStatus.SELECT_METHOD)

    async def refresh_pending(self):
        try:
            self.pending = await self.store.list_pending_external_invoices()
        except RecostError as e:
            logger.warning(f"Failed to load KSeF invoices: {str(e)}")

    def start(self):
        self._move(ProcessingStatus.SELECT_METHOD)
        self.notification = None

    def reset(self):
        """Back to IDLE. The selected property is kept as the last used one."""
        self._move(ProcessingStatus.IDLE)
        self.file_data = None
        self.file_mime_type = ""
        self.draft = None
        self.validation_errors = []
        self.last_upload_link = None
        self.notification = None

    # Properties

    def _find_property(self, property_id: str) -> Property:
        prop = next((p for p in self.properties if p.id == property_id), None)
        if prop is None:
            raise PropertyNotFoundError(f"Unknown property {property_id}")
        return prop

    def _find_active_property(self, property_id: str) -> Property:
        prop = self._find_property(property_id)
        if prop.is_archived:
            raise PropertyNotFoundError(f"Property {property_id} is archived")
        return prop

    def select_property(self, property_id: str | None):
        if property_id is not None:
            self._find_active_property(property_id)
        self.selected_property_id = property_id

    async def refresh_properties(self) -> List[Property]:
        self.properties = await self.store.list_properties()
        return self.properties

    async def save_property(self, prop: Property) -> Property:
        """Persist a property; a newly created one becomes the selected property"""
        is_new = not any(p.id == prop.id for p in self.properties)
        saved = await self.store.save_property(prop)
        await self.refresh_properties()
        if is_new and not saved.is_archived:
            self.selected_property_id = saved.id
        elif saved.is_archived and self.selected_property_id == saved.id:
            # Archived properties cannot stay selected
            self.selected_property_id = None
        return saved

    async def add_property(self, address: str) -> Property:
        address = address.strip()
        return await self.save_property(Property(id=str(uuid.uuid4()), name=address, address=address))

    async def toggle_archive(self, property_id: str) -> Property:
        prop = self._find_property(property_id)
        return await self.save_property(prop.model_copy(update={"is_archived": not prop.is_archived}))

    # Scan / manual entry / review

    async def select_file(self, base64_data: str, mime_type: str):
        """Analyze an uploaded or photographed document and open the review"""
        self._move(ProcessingStatus.ANALYZING)
        self.validation_errors = []
        self.notification = None
        self.file_data = strip_data_url(base64_data)
        self.file_mime_type = mime_type

        try:
            result = await self.extractor(self.file_data, mime_type, self.properties)
        except ExtractionError as e:
            self.file_data = None
            self.file_mime_type = ""
            self._move(ProcessingStatus.SELECT_METHOD)
            self._notify(e.user_message)
            return

        self.draft = result
        suggested = result.suggested_property_id
        if suggested and any(p.id == suggested for p in self.active_properties):
            self.selected_property_id = suggested
        self._move(ProcessingStatus.REVIEW)

    def manual_entry(self):
        self._move(ProcessingStatus.REVIEW)
        self.file_data = None
        self.file_mime_type = ""
        self.draft = ExtractedInvoiceData(date=self.today().isoformat(), currency=self.default_currency)
        self.validation_errors = []
        self.notification = None

    def update_draft(self, update: DraftUpdate) -> ExtractedInvoiceData:
        self._require(ProcessingStatus.REVIEW, "Editing the draft")
        if self.draft is None:
            self.draft = ExtractedInvoiceData(currency=self.default_currency)
        self.draft = ExtractedInvoiceData.model_validate(
            {**self.draft.model_dump(), **update.model_dump(exclude_unset=True)}
        )
        return self.draft

    async def submit(self) -> bool:
        """
        Validate the draft and upload it.

        Returns:
            True when the invoice reached the cloud, False when validation or
            the upload failed (see validation_errors / notification)
        """
        if self.status != ProcessingStatus.REVIEW:
            raise InvalidTransitionError(self.status, ProcessingStatus.UPLOADING)

        errors = validate_review(self.draft, self.selected_property_id)
        if errors:
            self.validation_errors = errors
            return False

        self.validation_errors = []
        upload = InvoiceUpload(
            **self.draft.model_dump(),
            property_id=self.selected_property_id,
            file_data=self.file_data,
            mime_type=self.file_mime_type or None,
        )

        self._move(ProcessingStatus.UPLOADING)
        try:
            result = await self.store.upload_invoice(upload)
        except StorageError as e:
            self._move(ProcessingStatus.REVIEW)
            self._notify(e.user_message)
            return False

        self.last_upload_link = result.drive_link
        await self._refresh_history()
        self._move(ProcessingStatus.SUCCESS)
        return True

    # KSeF inbox

    async def open_pending_inbox(self):
        if self.status != ProcessingStatus.IDLE:
            raise InvalidTransitionError(self.status, ProcessingStatus.PENDING_INBOX)

        try:
            self.pending = await self.store.list_pending_external_invoices()
        except RecostError as e:
            logger.error(f"KSeF fetch failed: {str(e)}")
            self._notify(KSEF_UNAVAILABLE)
            return
        self.notification = None
        self._move(ProcessingStatus.PENDING_INBOX)

    def _find_pending(self, invoice_id: str) -> PendingExternalInvoice:
        invoice = next((i for i in self.pending if i.id == invoice_id), None)
        if invoice is None:
            raise PendingInvoiceNotFoundError(f"No pending e-invoice {invoice_id}")
        return invoice

    def choose_pending_property(self, invoice_id: str, property_id: str):
        self._find_pending(invoice_id)
        self._find_active_property(property_id)
        self.pending_property_selections[invoice_id] = property_id

    async def approve_pending(self, invoice_id: str) -> bool:
        """
        Commit one e-invoice to its chosen property (or the selected one).

        Returns:
            True if the invoice was committed and removed from the inbox
        """
        self._require(ProcessingStatus.PENDING_INBOX, "Approving an e-invoice")
        invoice = self._find_pending(invoice_id)

        target = self.pending_property_selections.get(invoice_id) or self.selected_property_id
        if not target:
            self._notify(SELECT_PROPERTY)
            return False

        self.processing_pending_id = invoice_id
        try:
            # e-invoices arrive as structured data, there is no scan to upload
            await self.store.upload_invoice(
                InvoiceUpload(**invoice.model_dump(exclude={"id", "suggested_category"}), property_id=target)
            )
        except StorageError as e:
            logger.error(f"Saving e-invoice {invoice_id} failed: {str(e)}")
            self._notify(PENDING_SAVE_FAILED)
            return False
        finally:
            self.processing_pending_id = None

        try:
            await self.store.commit_external_invoice(invoice_id)
        except StorageError as e:
            logger.warning(f"Could not mark e-invoice {invoice_id} as committed: {str(e)}")

        self.pending = [i for i in self.pending if i.id != invoice_id]
        self.pending_property_selections.pop(invoice_id, None)
        await self._refresh_history()
        logger.info("E-invoice approved", invoice_id=invoice_id, property_id=target, remaining=len(self.pending))

        if not self.pending:
            self.last_upload_link = None
            self._move(ProcessingStatus.SUCCESS)
        return True

    def snapshot(self) -> SessionState:
        return SessionState(
            status=self.status,
            properties=self.properties,
            selected_property_id=self.selected_property_id,
            has_file=self.file_data is not None,
            file_mime_type=self.file_mime_type,
            draft=self.draft,
            validation_errors=self.validation_errors,
            pending_invoices=self.pending,
            pending_count=len(self.pending),
            pending_property_selections=self.pending_property_selections,
            processing_pending_id=self.processing_pending_id,
            # Scan payloads are not part of the snapshot
            history=[r.model_copy(update={"file_data": None}) for r in self.history],
            last_upload_link=self.last_upload_link,
            notification=self.notification,
        )
