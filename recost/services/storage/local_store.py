"""
Mocked cloud backend.

In production the Drive upload and the Sheets append happen on a backend
that owns the Google OAuth credentials (see HttpDocumentStore). Here both are
simulated: records go to the key-value store and the network is a sleep.
"""

import asyncio
import json
import random
import uuid
from typing import List
from loguru import logger
from .document_store_base import DocumentStore
from .kv_store import KeyValueStoreBase, PROPERTIES_KEY, INVOICES_KEY, COMMITTED_EXTERNAL_KEY
from ...core.errors import StorageError
from ...models import InvoiceRecord, InvoiceUpload, PendingExternalInvoice, Property, UploadResult

# Simulated round-trip times, in seconds
LIST_PROPERTIES_DELAY = 0.5
UPLOAD_DELAY = 1.0
PENDING_DELAY = 0.8

DEFAULT_PROPERTIES = [
    Property(id="1", name="ul. Wiśniowa 12/4, Warszawa", address="ul. Wiśniowa 12/4, Warszawa",
             is_archived=False, drive_folder_id="folder_123"),
    Property(id="2", name="Al. Jerozolimskie 50, Warszawa", address="Al. Jerozolimskie 50, Warszawa",
             is_archived=False, drive_folder_id="folder_456"),
    Property(id="3", name="ul. Długa 5, Kraków", address="ul. Długa 5, Kraków",
             is_archived=True, drive_folder_id="folder_789"),
]

SAMPLE_KSEF_INVOICES = [
    PendingExternalInvoice(
        id="ksef_1",
        seller_name="Castorama Polska Sp. z o.o.",
        invoice_number="FV/2025/12/10/001",
        date="2025-12-10",
        net_amount=1000.41,
        vat_amount=230.09,
        gross_amount=1230.50,
        currency="PLN",
        suggested_category="Building materials",
    ),
    PendingExternalInvoice(
        id="ksef_2",
        seller_name="Hurtownia Elektryczna MEGAWAT",
        invoice_number="HE/55/2025",
        date="2025-12-11",
        net_amount=450.00,
        vat_amount=103.50,
        gross_amount=553.50,
        currency="PLN",
        suggested_category="Installations",
    ),
    PendingExternalInvoice(
        id="ksef_3",
        seller_name="PGE Obrót S.A.",
        invoice_number="PGE/123123/2025",
        date="2025-12-12",
        net_amount=200.00,
        vat_amount=46.00,
        gross_amount=246.00,
        currency="PLN",
        suggested_category="Utilities",
    ),
]


class LocalDocumentStore(DocumentStore):
    def __init__(self, kv: KeyValueStoreBase, latency_scale: float = 1.0):
        self.kv = kv
        self.latency_scale = latency_scale

    async def _simulate_latency(self, seconds: float):
        if self.latency_scale > 0:
            await asyncio.sleep(seconds * self.latency_scale)

    def _read_list(self, key: str) -> list:
        raw = self.kv.get(key)
        return json.loads(raw) if raw else []

    async def list_properties(self) -> List[Property]:
        await self._simulate_latency(LIST_PROPERTIES_DELAY)

        stored = self._read_list(PROPERTIES_KEY)
        if stored:
            return [Property.model_validate(p) for p in stored]

        logger.info("No properties stored, seeding defaults", count=len(DEFAULT_PROPERTIES))
        defaults = [p.model_copy() for p in DEFAULT_PROPERTIES]
        self.kv.set(PROPERTIES_KEY, json.dumps([p.model_dump() for p in defaults]))
        return defaults

    async def save_property(self, prop: Property) -> Property:
        properties = await self.list_properties()

        if any(p.id == prop.id for p in properties):
            properties = [prop if p.id == prop.id else p for p in properties]
        else:
            # Simulate creating a Drive folder for the new property
            folder_id = f"folder_{uuid.uuid4().hex[:12]}"
            properties.append(prop.model_copy(update={"drive_folder_id": folder_id}))
            logger.info("[MOCK CLOUD] Created Drive folder", property_id=prop.id, folder_id=folder_id)

        self.kv.set(PROPERTIES_KEY, json.dumps([p.model_dump() for p in properties]))
        return prop

    async def upload_invoice(self, upload: InvoiceUpload) -> UploadResult:
        await self._simulate_latency(UPLOAD_DELAY)

        try:
            drive_link = None
            if upload.file_data and upload.mime_type:
                drive_link = f"https://drive.google.com/drive/folders/mock_id_{random.randint(0, 999)}"
                logger.info(
                    "[MOCK CLOUD] Uploaded scan to Drive",
                    mime_type=upload.mime_type,
                    property_id=upload.property_id,
                )
            else:
                logger.info("[MOCK CLOUD] Manual entry - skipping Drive upload", property_id=upload.property_id)

            # Row 1 is the sheet header
            sheet_row = random.randint(2, 101)

            record = InvoiceRecord(
                **upload.model_dump(exclude={"file_data", "mime_type", "property_id"}),
                id=str(uuid.uuid4()),
                property_id=upload.property_id,
                file_data=upload.file_data or None,
                file_mime_type=upload.mime_type or "",
                drive_link=drive_link,
                sheet_row=sheet_row,
            )
            history = self._read_list(INVOICES_KEY)
            self.kv.set(INVOICES_KEY, json.dumps([record.model_dump()] + history))

            logger.info(
                "[MOCK CLOUD] Appended row to Sheets",
                sheet_row=sheet_row,
                seller=upload.seller_name,
                gross=upload.gross_amount,
            )
            return UploadResult(drive_link=drive_link, sheet_row=sheet_row)
        except Exception as e:
            logger.error(f"Mock cloud upload failed: {str(e)}")
            raise StorageError(f"Invoice upload failed: {str(e)}") from e

    def list_recent_invoices(self) -> List[InvoiceRecord]:
        return [InvoiceRecord.model_validate(r) for r in self._read_list(INVOICES_KEY)]

    async def list_pending_external_invoices(self) -> List[PendingExternalInvoice]:
        await self._simulate_latency(PENDING_DELAY)

        committed = set(self._read_list(COMMITTED_EXTERNAL_KEY))
        return [inv.model_copy() for inv in SAMPLE_KSEF_INVOICES if inv.id not in committed]

    async def commit_external_invoice(self, invoice_id: str) -> None:
        committed = self._read_list(COMMITTED_EXTERNAL_KEY)
        if invoice_id not in committed:
            committed.append(invoice_id)
            self.kv.set(COMMITTED_EXTERNAL_KEY, json.dumps(committed))
