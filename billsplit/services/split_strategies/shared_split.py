"""Shared split strategy"""

from decimal import Decimal

from billsplit.schemas.bill import BillItem
from billsplit.services.split_strategies.base import BaseSplitStrategy


class SharedSplitStrategy(BaseSplitStrategy):
    """Strategy for dividing an item equally among all its assignees"""

    def calculate_share(self, item: BillItem) -> Decimal:
        """
        Divide the item's full price by the number of assignees.

        Every assignee counts, including ids that are not among the
        participants being summarized, so no one absorbs an absent
        person's portion.

        Args:
            item: Bill item with more than one assignee

        Returns:
            Equal fraction of the item's price
        """
        return item.line_total / len(item.assigned_participant_ids)
