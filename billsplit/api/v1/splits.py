"""Split calculation endpoints"""

from fastapi import APIRouter

from billsplit.schemas.bill import SplitCalculationRequest, SplitCalculationResponse
from billsplit.services.split_calculator import SplitCalculator

router = APIRouter(prefix="/splits", tags=["Splits"])


@router.post("/calculate", response_model=SplitCalculationResponse)
async def calculate_splits(request: SplitCalculationRequest):
    """
    Calculate each participant's share of items, tax and tip.

    Amounts are returned unrounded.
    """
    summaries = SplitCalculator.calculate_splits(
        request.items,
        request.participants,
        request.subtotal,
        request.tax,
        request.tip,
    )
    return SplitCalculationResponse(summaries=summaries)
