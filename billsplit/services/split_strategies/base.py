"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal

from billsplit.schemas.bill import BillItem


class BaseSplitStrategy(ABC):
    """Base class for item split strategies"""

    @abstractmethod
    def calculate_share(self, item: BillItem) -> Decimal:
        """
        Calculate the amount of an item charged to each of its assignees.

        Args:
            item: Bill item with at least one assignee

        Returns:
            Amount charged to a single assignee
        """
        pass
