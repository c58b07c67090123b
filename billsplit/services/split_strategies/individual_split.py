"""Individual split strategy"""

from decimal import Decimal

from billsplit.schemas.bill import BillItem
from billsplit.services.split_strategies.base import BaseSplitStrategy


class IndividualSplitStrategy(BaseSplitStrategy):
    """Strategy for an item charged in full to its single assignee"""

    def calculate_share(self, item: BillItem) -> Decimal:
        return item.line_total
