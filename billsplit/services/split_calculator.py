"""Split calculation business logic"""
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext
from typing import List, Sequence

from billsplit.schemas.bill import BillItem, Participant, PersonSummary
from billsplit.services.split_strategies import get_split_strategy
from billsplit.utils.decimal_utils import Number, as_decimal, sum_decimals

# Fixed arithmetic context so results do not depend on the caller's context
CALCULATION_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)


class SplitCalculator:
    """Allocates item costs, tax and tip across participants"""

    @staticmethod
    def calculate_splits(
        items: Sequence[BillItem],
        participants: Sequence[Participant],
        subtotal: Number,
        tax: Number,
        tip: Number
    ) -> List[PersonSummary]:
        """
        Calculate how much each participant owes.

        Tax and tip are prorated by each participant's share of the subtotal
        recomputed from the current items. Unassigned items still count in
        that subtotal, so their tax and tip are charged to nobody. No rounding
        is applied; round at presentation time.

        Args:
            items: Bill items with their current assignments
            participants: Participants, in output order
            subtotal: Stored subtotal, used only when items sum to zero
            tax: Bill-level tax
            tip: Bill-level tip

        Returns:
            One PersonSummary per participant, in participant order
        """
        with localcontext(CALCULATION_CONTEXT):
            tax = as_decimal(tax)
            tip = as_decimal(tip)

            items_subtotal = SplitCalculator.subtotal_from_items(items)
            effective_subtotal = (
                items_subtotal if items_subtotal > 0 else as_decimal(subtotal)
            )

            summaries = []
            for participant in participants:
                assigned_items = [
                    item for item in items
                    if participant.id in item.assigned_participant_ids
                ]
                items_total = sum_decimals(
                    get_split_strategy(item.split_kind).calculate_share(item)
                    for item in assigned_items
                )

                if effective_subtotal > 0:
                    personal_share = items_total / effective_subtotal
                else:
                    personal_share = Decimal("0")

                tax_share = tax * personal_share
                tip_share = tip * personal_share

                summaries.append(PersonSummary(
                    participant_id=participant.id,
                    participant_name=participant.name,
                    items_total=items_total,
                    tax_share=tax_share,
                    tip_share=tip_share,
                    grand_total=items_total + tax_share + tip_share,
                    items=assigned_items
                ))

        return summaries

    @staticmethod
    def subtotal_from_items(items: Sequence[BillItem]) -> Decimal:
        """
        Sum unit price times quantity over all items, assigned or not.

        Args:
            items: Bill items

        Returns:
            Subtotal of the current items
        """
        with localcontext(CALCULATION_CONTEXT):
            return sum_decimals(item.line_total for item in items)

    @staticmethod
    def all_items_assigned(items: Sequence[BillItem]) -> bool:
        """Check that every item has at least one assignee"""
        return all(item.is_assigned for item in items)

    @staticmethod
    def calculate_equal_split(total: Number, participant_count: int) -> Decimal:
        """
        Divide a total equally, ignoring item assignments.

        Args:
            total: Amount to divide
            participant_count: Number of people

        Returns:
            Amount per person, or 0 when there is nobody to split with
        """
        if participant_count <= 0:
            return Decimal("0")
        with localcontext(CALCULATION_CONTEXT):
            return as_decimal(total) / participant_count
