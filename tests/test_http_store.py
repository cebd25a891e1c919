"""
Tests for the backend-delegating document store.

The backend is mocked with respx; no network access is needed.
"""

import asyncio
import httpx
import pytest
import respx
from recost.core.errors import StorageError
from recost.models import InvoiceUpload, Property
from recost.services.storage import HttpDocumentStore

BASE_URL = "https://backend.example.com"


@pytest.fixture
def store():
    return HttpDocumentStore(BASE_URL + "/", timeout=2)


@respx.mock
def test_list_properties(store):
    respx.get(f"{BASE_URL}/properties").mock(return_value=httpx.Response(200, json=[
        {"id": "1", "name": "ul. Wiśniowa 12/4", "address": "ul. Wiśniowa 12/4, Warszawa", "drive_folder_id": "f1"},
    ]))

    properties = asyncio.run(store.list_properties())

    assert properties == [
        Property(id="1", name="ul. Wiśniowa 12/4", address="ul. Wiśniowa 12/4, Warszawa", drive_folder_id="f1")
    ]


@respx.mock
def test_save_property_puts_by_id(store):
    route = respx.put(f"{BASE_URL}/properties/7").mock(return_value=httpx.Response(204))

    prop = Property(id="7", name="ul. Polna 9", address="ul. Polna 9")
    assert asyncio.run(store.save_property(prop)) == prop
    assert route.called


@respx.mock
def test_upload_invoice(store):
    route = respx.post(f"{BASE_URL}/invoices").mock(return_value=httpx.Response(
        200, json={"drive_link": "https://drive.google.com/file/d/abc", "sheet_row": 14}
    ))

    result = asyncio.run(store.upload_invoice(
        InvoiceUpload(seller_name="ACME", gross_amount=123, property_id="1", file_data="AAAA", mime_type="image/png")
    ))

    assert result.sheet_row == 14
    assert result.drive_link == "https://drive.google.com/file/d/abc"
    assert b'"property_id":"1"' in route.calls.last.request.content.replace(b" ", b"")


@respx.mock
def test_server_error_becomes_storage_error(store):
    respx.post(f"{BASE_URL}/invoices").mock(return_value=httpx.Response(500))

    with pytest.raises(StorageError):
        asyncio.run(store.upload_invoice(InvoiceUpload(seller_name="ACME", property_id="1")))


@respx.mock
def test_connection_error_becomes_storage_error(store):
    respx.get(f"{BASE_URL}/ksef/pending").mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(StorageError) as exc_info:
        asyncio.run(store.list_pending_external_invoices())

    assert "connection refused" in str(exc_info.value)


@respx.mock
def test_recent_invoices(store):
    respx.get(f"{BASE_URL}/invoices").mock(return_value=httpx.Response(200, json=[
        {"id": "r1", "property_id": "1", "seller_name": "ACME", "gross_amount": 10, "sheet_row": 3},
    ]))

    history = store.list_recent_invoices()

    assert history[0].id == "r1"
    assert history[0].sheet_row == 3


@respx.mock
def test_commit_pending_invoice(store):
    route = respx.post(f"{BASE_URL}/ksef/ksef_1/commit").mock(return_value=httpx.Response(204))

    asyncio.run(store.commit_external_invoice("ksef_1"))

    assert route.called
