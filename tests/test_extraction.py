"""
Unit tests for the Gemini extraction client.

The Gemini call itself is patched out; these tests cover prompt building,
response normalization and how failures are reported.
"""

import asyncio
import base64
import pytest
from unittest.mock import AsyncMock, patch
from recost.core.config import settings
from recost.core.errors import EmptyModelResponseError, ExtractionError
from recost.models import Property
from recost.services.extraction import (
    PROPERTY_MATCH_INSTRUCTION,
    build_prompt,
    extract_invoice_data,
    normalize_extracted,
    strip_data_url,
)

PROPERTIES = [
    Property(id="1", name="ul. Wiśniowa 12/4", address="ul. Wiśniowa 12/4, Warszawa"),
    Property(id="3", name="ul. Długa 5", address="ul. Długa 5, Kraków", is_archived=True),
]

SAMPLE_B64 = base64.b64encode(b"%PDF-1.4 sample invoice").decode()


@pytest.fixture
def gemini_configured():
    settings.gemini_api_key = "test-key"


class TestNormalizeExtracted:
    def test_mixed_response(self):
        """Non-numeric amounts become 0 and a "null" currency falls back to the default"""
        data = normalize_extracted(
            {"sellerName": "ACME", "netAmount": "abc", "vatAmount": 23, "grossAmount": 123, "currency": "null"},
            default_currency="PLN",
        )

        assert data.seller_name == "ACME"
        assert data.net_amount == 0
        assert data.vat_amount == 23
        assert data.gross_amount == 123
        assert data.currency == "PLN"

    def test_null_strings_become_empty(self):
        data = normalize_extracted({"sellerName": "null", "invoiceNumber": "null", "date": "null"})

        assert data.seller_name == ""
        assert data.invoice_number == ""
        assert data.date == ""

    def test_missing_fields_use_defaults(self):
        data = normalize_extracted({})

        assert data.seller_name == ""
        assert data.net_amount == 0
        assert data.gross_amount == 0
        assert data.currency == settings.default_currency
        assert data.suggested_property_id is None

    def test_booleans_and_negative_amounts_are_rejected(self):
        data = normalize_extracted({"netAmount": True, "vatAmount": -5, "grossAmount": 12.5})

        assert data.net_amount == 0
        assert data.vat_amount == 0
        assert data.gross_amount == 12.5

    def test_suggested_property(self):
        assert normalize_extracted({"suggestedPropertyId": "2"}).suggested_property_id == "2"
        assert normalize_extracted({"suggestedPropertyId": ""}).suggested_property_id is None
        assert normalize_extracted({"suggestedPropertyId": "null"}).suggested_property_id is None


class TestBuildPrompt:
    def test_lists_only_active_properties(self):
        prompt = build_prompt(PROPERTIES)

        assert "1: ul. Wiśniowa 12/4, Warszawa" in prompt
        assert "Kraków" not in prompt
        assert PROPERTY_MATCH_INSTRUCTION in prompt

    def test_no_matching_instruction_without_properties(self):
        assert PROPERTY_MATCH_INSTRUCTION not in build_prompt([])
        assert PROPERTY_MATCH_INSTRUCTION not in build_prompt([PROPERTIES[1]])


def test_strip_data_url():
    assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
    assert strip_data_url("AAAA") == "AAAA"


def test_mock_extraction_without_api_key():
    data = asyncio.run(extract_invoice_data(SAMPLE_B64, "application/pdf"))

    assert data.seller_name
    assert data.gross_amount > 0
    assert data.currency == settings.default_currency


def test_extraction_success(gemini_configured):
    response = '{"sellerName": "PGE Obrót S.A.", "invoiceNumber": "PGE/1/2025", "date": "2025-12-12", ' \
               '"netAmount": 200, "vatAmount": 46, "grossAmount": 246, "currency": "PLN", "suggestedPropertyId": "1"}'

    with patch("recost.services.extraction._generate_content", AsyncMock(return_value=response)) as generate:
        data = asyncio.run(extract_invoice_data("data:application/pdf;base64," + SAMPLE_B64, "application/pdf", PROPERTIES))

    assert data.seller_name == "PGE Obrót S.A."
    assert data.gross_amount == 246
    assert data.suggested_property_id == "1"

    base64_data, mime_type, prompt = generate.call_args.args
    assert base64_data == SAMPLE_B64
    assert mime_type == "application/pdf"
    assert "1: ul. Wiśniowa 12/4, Warszawa" in prompt


def test_empty_response_raises(gemini_configured):
    with patch("recost.services.extraction._generate_content", AsyncMock(return_value=None)):
        with pytest.raises(EmptyModelResponseError) as exc_info:
            asyncio.run(extract_invoice_data(SAMPLE_B64, "image/jpeg"))

    assert exc_info.value.user_message == ExtractionError.user_message


def test_invalid_json_is_generic_failure(gemini_configured):
    with patch("recost.services.extraction._generate_content", AsyncMock(return_value="not json")):
        with pytest.raises(ExtractionError) as exc_info:
            asyncio.run(extract_invoice_data(SAMPLE_B64, "image/jpeg"))

    assert "not json" not in exc_info.value.user_message


def test_sdk_error_is_wrapped(gemini_configured):
    with patch("recost.services.extraction._generate_content", AsyncMock(side_effect=RuntimeError("quota exceeded"))):
        with pytest.raises(ExtractionError) as exc_info:
            asyncio.run(extract_invoice_data(SAMPLE_B64, "image/jpeg"))

    assert "quota" not in exc_info.value.user_message
    assert "quota" in str(exc_info.value)


def test_non_object_json_is_rejected(gemini_configured):
    with patch("recost.services.extraction._generate_content", AsyncMock(return_value="[1, 2]")):
        with pytest.raises(ExtractionError):
            asyncio.run(extract_invoice_data(SAMPLE_B64, "image/jpeg"))
