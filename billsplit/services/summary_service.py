"""Shareable text for a finished split"""
from decimal import Decimal
from typing import Sequence

from billsplit.schemas.bill import BillSession, PersonSummary
from billsplit.utils.decimal_utils import round_decimal, sum_decimals


def format_money(amount: Decimal, currency: str) -> str:
    """Render an amount as `<CODE> 1,234.50`"""
    return f"{currency} {round_decimal(amount):,.2f}"


class SummaryService:
    """Builds the plain text a group can paste into a chat"""

    @staticmethod
    def build_summary_text(
        session: BillSession,
        summaries: Sequence[PersonSummary],
        title: str = "Bill Split"
    ) -> str:
        """
        Render the split as plain text.

        The bill total is the stored receipt total; when the receipt had
        none, the sum of everyone's grand totals is shown instead. Tax and
        tip lines are omitted for participants with no share of them.

        Args:
            session: Bill session the summaries were calculated from
            summaries: Output of the split calculator
            title: First line of the text

        Returns:
            Multi-line summary text
        """
        currency = session.currency
        total = session.total
        if total == 0:
            total = sum_decimals(summary.grand_total for summary in summaries)

        lines = [title]
        if session.merchant_name:
            lines.append(f"@ {session.merchant_name}")
        lines.append(f"Total: {format_money(total, currency)}")

        for summary in summaries:
            lines.append("")
            lines.append(
                f"{summary.participant_name}: {format_money(summary.grand_total, currency)}"
            )
            lines.append(f"  Items: {format_money(summary.items_total, currency)}")
            if summary.tax_share > 0:
                lines.append(f"  Tax: {format_money(summary.tax_share, currency)}")
            if summary.tip_share > 0:
                lines.append(f"  Tip: {format_money(summary.tip_share, currency)}")

        return "\n".join(lines)
