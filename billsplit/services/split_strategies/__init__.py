"""Item split strategies"""

from billsplit.core.exceptions import ValidationError
from billsplit.schemas.bill import SplitKind
from billsplit.services.split_strategies.base import BaseSplitStrategy
from billsplit.services.split_strategies.individual_split import \
    IndividualSplitStrategy
from billsplit.services.split_strategies.shared_split import \
    SharedSplitStrategy


def get_split_strategy(split_kind: SplitKind) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split kind.

    Args:
        split_kind: Kind of split (INDIVIDUAL or SHARED)

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If split_kind is not recognized
    """
    strategies = {
        SplitKind.INDIVIDUAL: IndividualSplitStrategy(),
        SplitKind.SHARED: SharedSplitStrategy(),
    }

    strategy = strategies.get(split_kind)
    if strategy is None:
        raise ValidationError(f"Unknown split kind: {split_kind}")

    return strategy


__all__ = [
    "BaseSplitStrategy",
    "IndividualSplitStrategy",
    "SharedSplitStrategy",
    "get_split_strategy",
]
