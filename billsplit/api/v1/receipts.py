"""Receipt endpoints"""

from typing import Any

from fastapi import APIRouter, Body, Query

from billsplit.core.exceptions import ValidationError
from billsplit.schemas.receipt import ParseTextRequest, Receipt
from billsplit.services.extraction_service import extract_json_object
from billsplit.services.receipt_validator import ReceiptValidator

router = APIRouter(prefix="/receipts", tags=["Receipts"])


@router.post("/validate", response_model=Receipt)
async def validate_receipt(
    payload: Any = Body(None),
    strict: bool = Query(False, description="Reject bodies that are not JSON objects"),
):
    """
    Validate an extraction service payload.

    Every field is coerced into range; a payload that cannot be read at all
    comes back as an empty receipt with confidence 0.

    Args:
        payload: Arbitrary JSON value
        strict: Return 400 instead of the empty receipt for non-object bodies

    Returns:
        Validated receipt

    Raises:
        400: If strict and the body is not a JSON object
    """
    if strict:
        receipt = ReceiptValidator.parse(payload)
        if receipt is None:
            raise ValidationError("Receipt payload must be a JSON object")
        return receipt

    return ReceiptValidator.parse_safe(payload)


@router.post("/parse-text", response_model=Receipt)
async def parse_receipt_text(request: ParseTextRequest):
    """
    Validate the JSON embedded in a raw extraction service reply.

    Args:
        request: Reply text, possibly wrapped in prose or a code fence

    Returns:
        Validated receipt (confidence 0 if no JSON object was found)
    """
    return ReceiptValidator.parse_safe(extract_json_object(request.text))
