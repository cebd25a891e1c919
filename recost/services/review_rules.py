"""
Business rules a reviewed invoice must satisfy before it is uploaded.

All violations are collected in order so the user sees every problem at once.
"""

from typing import List
from loguru import logger
from ..models import ExtractedInvoiceData

SELECT_PROPERTY = "Select a property from the list."
ENTER_SELLER = "Enter the seller name."
ENTER_DATE = "Enter the document date."
ENTER_GROSS = "Enter the gross amount."
MISSING_DATA = "Missing invoice data."


def validate_review(draft: ExtractedInvoiceData | None, property_id: str | None) -> List[str]:
    """
    Check a review draft against the submission rules.

    Args:
        draft: The edited invoice data (None if nothing was extracted or entered)
        property_id: Currently selected target property

    Returns:
        Human-readable messages in display order; empty when the draft can be submitted
    """
    errors = []

    if not property_id:
        errors.append(SELECT_PROPERTY)

    if draft is None:
        errors.append(MISSING_DATA)
    else:
        if not draft.seller_name or not draft.seller_name.strip():
            errors.append(ENTER_SELLER)
        if not draft.date:
            errors.append(ENTER_DATE)
        # Zero is a legitimate gross amount, only a missing value is rejected
        if draft.gross_amount is None:
            errors.append(ENTER_GROSS)

    if errors:
        logger.info("Review validation failed", errors=errors, property_id=property_id)

    return errors
