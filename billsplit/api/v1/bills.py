"""Bill session endpoints"""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from billsplit.config import Settings, get_settings
from billsplit.core.exceptions import ValidationError
from billsplit.schemas.bill import (BillSession, BillSummaryResponse,
                                    SplitCalculationResponse)
from billsplit.schemas.bill_action import BillActionRequest
from billsplit.services.bill_service import BillService
from billsplit.services.receipt_validator import ReceiptValidator
from billsplit.services.split_calculator import SplitCalculator
from billsplit.services.summary_service import SummaryService

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.post("", response_model=BillSession, status_code=status.HTTP_201_CREATED)
async def create_bill(payload: Any = Body(None)):
    """
    Start a bill session from an extraction service payload.

    Send `{}` to start an empty bill for manual entry.

    Args:
        payload: Arbitrary JSON value describing a receipt

    Returns:
        New bill session with stamped items and no participants

    Raises:
        400: If the receipt could not be read (confidence 0)
    """
    receipt = ReceiptValidator.parse_safe(payload)
    if not receipt.is_usable:
        raise ValidationError(
            "Failed to parse receipt. Please try again with a clearer image."
        )

    return BillService.from_receipt(receipt)


@router.post("/actions", response_model=BillSession)
async def apply_action(request: BillActionRequest):
    """
    Apply one action to a bill session and return the new session.

    Args:
        request: Current bill snapshot and the action to apply

    Returns:
        Updated bill session

    Raises:
        400: If a participant name is blank
        404: If the action names an unknown item or participant
        409: If a participant name is already taken
    """
    return BillService.apply(request.bill, request.action)


@router.post("/summary", response_model=BillSummaryResponse)
async def summarize_bill(
    bill: BillSession, settings: Settings = Depends(get_settings)
):
    """
    Calculate the current split and its shareable text.

    Unassigned items are allowed here; check `allItemsAssigned` before
    treating the result as final.

    Args:
        bill: Bill session snapshot

    Returns:
        Per-participant summaries, share text and assignment status
    """
    summaries = BillService.calculate(bill)
    return BillSummaryResponse(
        summaries=summaries,
        text=SummaryService.build_summary_text(
            bill, summaries, title=settings.summary_title
        ),
        all_items_assigned=SplitCalculator.all_items_assigned(bill.items),
    )


@router.post("/finalize", response_model=SplitCalculationResponse)
async def finalize_bill(bill: BillSession):
    """
    Calculate the final split.

    Args:
        bill: Bill session snapshot

    Returns:
        Per-participant summaries

    Raises:
        400: If there are no participants or an item is unassigned
    """
    return SplitCalculationResponse(summaries=BillService.finalize(bill))
