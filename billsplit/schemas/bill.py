"""Bill session schemas"""
import enum
from decimal import Decimal
from typing import List

from pydantic import Field, computed_field, field_validator

from billsplit.schemas.common import (CamelModel, DisplayName, Money, Quantity,
                                     RequiredName)
from billsplit.utils.coercion import CURRENCY_PATTERN, DEFAULT_CURRENCY


class SplitKind(str, enum.Enum):
    """How an item's cost is divided among its assignees"""
    INDIVIDUAL = "INDIVIDUAL"
    SHARED = "SHARED"


class Participant(CamelModel):
    """A person splitting the bill"""

    id: str = Field(..., min_length=1)
    name: RequiredName


class BillItem(CamelModel):
    """A priced line on the bill, possibly shared"""

    id: str = Field(..., min_length=1)
    name: DisplayName
    unit_price: Money
    quantity: Quantity = 1
    assigned_participant_ids: List[str] = Field(default_factory=list)
    manually_edited: bool = False

    @field_validator("assigned_participant_ids")
    @classmethod
    def deduplicate_assignees(cls, v: List[str]) -> List[str]:
        """Keep the first occurrence of each participant id"""
        return list(dict.fromkeys(v))

    @computed_field(alias="splitKind")
    @property
    def split_kind(self) -> SplitKind:
        """Shared when more than one participant is assigned"""
        if len(self.assigned_participant_ids) > 1:
            return SplitKind.SHARED
        return SplitKind.INDIVIDUAL

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_participant_ids)


class BillSession(CamelModel):
    """Snapshot of one bill being split"""

    merchant_name: DisplayName = ""
    currency: str = Field(default=DEFAULT_CURRENCY, pattern=CURRENCY_PATTERN.pattern)
    items: List[BillItem] = Field(default_factory=list)
    participants: List[Participant] = Field(default_factory=list)
    subtotal: Money = Decimal("0")
    tax: Money = Decimal("0")
    tip: Money = Decimal("0")
    total: Money = Decimal("0")


class PersonSummary(CamelModel):
    """Amount owed by one participant"""

    participant_id: str
    participant_name: str
    items_total: Decimal
    tax_share: Decimal
    tip_share: Decimal
    grand_total: Decimal
    items: List[BillItem]


class SplitCalculationRequest(CamelModel):
    """Inputs for a split calculation"""

    items: List[BillItem] = Field(default_factory=list)
    participants: List[Participant] = Field(default_factory=list)
    subtotal: Money = Decimal("0")
    tax: Money = Decimal("0")
    tip: Money = Decimal("0")


class SplitCalculationResponse(CamelModel):
    """Per-participant breakdown, in participant order"""

    summaries: List[PersonSummary]


class BillSummaryResponse(SplitCalculationResponse):
    """Breakdown plus shareable text"""

    text: str
    all_items_assigned: bool
