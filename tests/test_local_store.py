"""
Tests for the mocked cloud backend (LocalDocumentStore).
"""

import asyncio
import json
import pytest
from recost.core.errors import StorageError
from recost.models import InvoiceUpload, Property
from recost.services.storage import InMemoryKeyValueStore, LocalDocumentStore
from recost.services.storage.kv_store import INVOICES_KEY, PROPERTIES_KEY


class BrokenInvoiceKV(InMemoryKeyValueStore):
    """Accepts everything except writes to the invoice history"""

    def set(self, key, value):
        if key == INVOICES_KEY:
            raise OSError("disk full")
        super().set(key, value)


def make_upload(**overrides):
    fields = {
        "seller_name": "ACME",
        "invoice_number": "FV/1/2025",
        "date": "2025-12-10",
        "gross_amount": 123.0,
        "property_id": "1",
    }
    fields.update(overrides)
    return InvoiceUpload(**fields)


def test_first_read_seeds_default_properties(store, kv):
    properties = asyncio.run(store.list_properties())

    assert [p.id for p in properties] == ["1", "2", "3"]
    assert properties[2].is_archived
    assert json.loads(kv.get(PROPERTIES_KEY))[0]["drive_folder_id"] == "folder_123"


def test_stored_properties_are_not_reseeded(store, kv):
    kv.set(PROPERTIES_KEY, json.dumps([{"id": "x", "name": "A", "address": "A"}]))

    properties = asyncio.run(store.list_properties())

    assert [p.id for p in properties] == ["x"]


def test_new_property_gets_folder(store):
    before = asyncio.run(store.list_properties())
    asyncio.run(store.save_property(Property(id="new-1", name="ul. Nowa 1", address="ul. Nowa 1")))
    after = asyncio.run(store.list_properties())

    assert len(after) == len(before) + 1
    created = next(p for p in after if p.id == "new-1")
    assert created.drive_folder_id
    assert created.address == "ul. Nowa 1"


def test_existing_property_is_replaced(store):
    asyncio.run(store.list_properties())
    asyncio.run(store.save_property(
        Property(id="2", name="Al. Jerozolimskie 50", address="Al. Jerozolimskie 50, Warszawa", is_archived=True)
    ))
    after = asyncio.run(store.list_properties())

    assert len(after) == 3
    assert next(p for p in after if p.id == "2").is_archived


def test_manual_upload_has_no_drive_link(store):
    result = asyncio.run(store.upload_invoice(make_upload()))

    assert result.drive_link is None
    assert 2 <= result.sheet_row <= 101


def test_scan_upload_has_drive_link(store):
    result = asyncio.run(store.upload_invoice(make_upload(file_data="AAAA", mime_type="image/jpeg")))

    assert result.drive_link.startswith("https://drive.google.com/drive/folders/mock_id_")


def test_history_is_newest_first(store):
    asyncio.run(store.upload_invoice(make_upload(invoice_number="FV/1")))
    asyncio.run(store.upload_invoice(make_upload(invoice_number="FV/2")))

    history = store.list_recent_invoices()

    assert [r.invoice_number for r in history] == ["FV/2", "FV/1"]
    assert history[0].id != history[1].id


def test_history_keeps_scan(store):
    asyncio.run(store.upload_invoice(make_upload(file_data="AAAA", mime_type="application/pdf")))

    record = store.list_recent_invoices()[0]

    assert record.file_data == "AAAA"
    assert record.file_mime_type == "application/pdf"


def test_upload_failure_raises_storage_error():
    store = LocalDocumentStore(BrokenInvoiceKV(), latency_scale=0)

    with pytest.raises(StorageError) as exc_info:
        asyncio.run(store.upload_invoice(make_upload()))

    assert "disk full" in str(exc_info.value)


def test_pending_invoices_are_fixed(store):
    first = asyncio.run(store.list_pending_external_invoices())
    second = asyncio.run(store.list_pending_external_invoices())

    assert [i.id for i in first] == ["ksef_1", "ksef_2", "ksef_3"]
    assert first == second


def test_committed_invoice_leaves_pending_list(store):
    asyncio.run(store.commit_external_invoice("ksef_3"))
    asyncio.run(store.commit_external_invoice("ksef_3"))

    pending = asyncio.run(store.list_pending_external_invoices())

    assert [i.id for i in pending] == ["ksef_1", "ksef_2"]
