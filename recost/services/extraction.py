
import base64
import json
from typing import Iterable
from loguru import logger
from google import genai
from google.genai import types
from ..core.config import settings
from ..core.errors import EmptyModelResponseError, ExtractionError
from ..models import ExtractedInvoiceData, Property

TEXT_FIELDS = {
    "sellerName": "seller_name",
    "invoiceNumber": "invoice_number",
    "date": "date",
}
AMOUNT_FIELDS = {
    "netAmount": "net_amount",
    "vatAmount": "vat_amount",
    "grossAmount": "gross_amount",
}

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "sellerName": types.Schema(type=types.Type.STRING, description="Full name of the seller/issuer of the invoice"),
        "invoiceNumber": types.Schema(type=types.Type.STRING, description="Invoice number"),
        "date": types.Schema(type=types.Type.STRING, description="Invoice issue date (YYYY-MM-DD)"),
        "netAmount": types.Schema(type=types.Type.NUMBER, description="Total net amount (number)"),
        "vatAmount": types.Schema(type=types.Type.NUMBER, description="Total VAT amount (number)"),
        "grossAmount": types.Schema(type=types.Type.NUMBER, description="Total gross amount due (number)"),
        "currency": types.Schema(type=types.Type.STRING, description="Currency code (e.g. PLN, EUR)"),
        "suggestedPropertyId": types.Schema(
            type=types.Type.STRING,
            description=(
                "ID of the property from the supplied list that best matches the buyer address "
                "or the place of service on the invoice. Return an empty string if nothing matches."
            ),
        ),
    },
    required=["sellerName", "netAmount", "vatAmount", "grossAmount"],
)

BASE_INSTRUCTION = (
    "Analyze this invoice document (image or PDF) and extract the key financial data.\n"
    "If a financial value is unclear, estimate it or use 0. Make sure the amounts are numbers."
)

PROPERTY_MATCH_INSTRUCTION = (
    "PROPERTY MATCHING: Compare the buyer address or the place of service on the document with the "
    "property list above. If you find a matching address (even with small spelling differences), "
    "put its ID in the 'suggestedPropertyId' field."
)


def strip_data_url(data: str) -> str:
    """Drop a `data:<mime>;base64,` prefix if the caller passed a full data URL"""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def build_prompt(properties: Iterable[Property] = ()) -> str:
    active = [p for p in properties if not p.is_archived]
    if not active:
        return BASE_INSTRUCTION

    listing = "\n".join(f"{p.id}: {p.address}" for p in active)
    return f"Known properties (ID: Address):\n{listing}\n\n{BASE_INSTRUCTION}\n\n{PROPERTY_MATCH_INSTRUCTION}"


def _clean_text(value) -> str | None:
    if isinstance(value, str) and value and value != "null":
        return value
    return None


def _clean_amount(value) -> float:
    # bool is an int subclass but never a valid amount
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
        return float(value)
    return 0.0


def normalize_extracted(raw: dict, default_currency: str | None = None) -> ExtractedInvoiceData:
    """
    Turn the model's JSON object into ExtractedInvoiceData.

    Missing or "null" text becomes "" (currency falls back to the default code),
    anything that is not a non-negative number becomes 0.
    """
    data = {field: _clean_text(raw.get(key)) or "" for key, field in TEXT_FIELDS.items()}
    data.update({field: _clean_amount(raw.get(key)) for key, field in AMOUNT_FIELDS.items()})
    data["currency"] = _clean_text(raw.get("currency")) or default_currency or settings.default_currency
    data["suggested_property_id"] = _clean_text(raw.get("suggestedPropertyId"))
    return ExtractedInvoiceData(**data)


async def _generate_content(base64_data: str, mime_type: str, prompt: str) -> str | None:
    client = genai.Client(api_key=settings.gemini_api_key)
    response = await client.aio.models.generate_content(
        model=settings.gemini_model,
        contents=[
            types.Part.from_bytes(data=base64.b64decode(base64_data), mime_type=mime_type),
            prompt,
        ],
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=0.1,  # Low temperature for factual extraction
        ),
    )
    return response.text


async def extract_invoice_data(
    base64_data: str,
    mime_type: str,
    properties: Iterable[Property] = (),
) -> ExtractedInvoiceData:
    base64_data = strip_data_url(base64_data)

    if not settings.gemini_api_key:
        logger.warning(
            "Gemini not configured - using MOCK data. "
            "Set GEMINI_API_KEY to use real extraction."
        )
        return ExtractedInvoiceData(
            seller_name="Castorama Polska Sp. z o.o.",
            invoice_number="FV/2025/10/001",
            date="2025-10-15",
            net_amount=100.0,
            vat_amount=23.0,
            gross_amount=123.0,
            currency=settings.default_currency,
        )

    properties = list(properties)
    logger.info(
        "Using Gemini for invoice extraction",
        model=settings.gemini_model,
        mime_type=mime_type,
        known_properties=len([p for p in properties if not p.is_archived]),
    )

    try:
        text = await _generate_content(base64_data, mime_type, build_prompt(properties))
        if not text:
            raise EmptyModelResponseError("No text response from the model")

        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ExtractionError(f"Expected a JSON object, got {type(raw).__name__}")

        data = normalize_extracted(raw)
        logger.info(
            "Successfully extracted invoice data from Gemini",
            seller=data.seller_name,
            invoice_number=data.invoice_number,
            suggested_property_id=data.suggested_property_id,
        )
        return data
    except ExtractionError as e:
        logger.error(f"Gemini extraction failed: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"Gemini extraction failed: {str(e)}")
        raise ExtractionError(f"Invoice extraction failed: {str(e)}") from e
