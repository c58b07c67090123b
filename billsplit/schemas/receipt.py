"""Receipt schemas

The receipt is the trust boundary between the extraction service output and
the rest of the application. Each field carries a `mode="before"` validator
that coerces whatever arrived into an in-range value, so validation of a
mapping never fails on field content.
"""
from decimal import Decimal
from typing import Any, List

from pydantic import Field, field_validator

from billsplit.schemas.common import CamelModel, Money
from billsplit.utils.coercion import (CURRENCY_PATTERN, DEFAULT_CONFIDENCE,
                                      DEFAULT_CURRENCY, DEFAULT_ITEM_NAME,
                                      MAX_ITEMS, MAX_QUANTITY, MAX_TEXT_LENGTH,
                                      MIN_QUANTITY, bounded_mappings,
                                      clamp_confidence, clamp_quantity,
                                      non_negative_decimal,
                                      normalize_currency, sanitize_text)


class ReceiptItem(CamelModel):
    """A line item as read from the receipt"""

    name: str = Field(default=DEFAULT_ITEM_NAME, max_length=MAX_TEXT_LENGTH)
    price: Money = Decimal("0")
    quantity: int = Field(default=MIN_QUANTITY, ge=MIN_QUANTITY, le=MAX_QUANTITY)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        return sanitize_text(v, default=DEFAULT_ITEM_NAME)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        return non_negative_decimal(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> int:
        return clamp_quantity(v)


class Receipt(CamelModel):
    """Validated, bounded representation of a parsed bill"""

    merchant_name: str = Field(default="", max_length=MAX_TEXT_LENGTH)
    items: List[ReceiptItem] = Field(default_factory=list, max_length=MAX_ITEMS)
    subtotal: Money = Decimal("0")
    tax: Money = Decimal("0")
    tip: Money = Decimal("0")
    total: Money = Decimal("0")
    currency: str = Field(default=DEFAULT_CURRENCY, pattern=CURRENCY_PATTERN.pattern)
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0, le=1)

    @field_validator("merchant_name", mode="before")
    @classmethod
    def coerce_merchant_name(cls, v: Any) -> str:
        return sanitize_text(v)

    @field_validator("items", mode="before")
    @classmethod
    def coerce_items(cls, v: Any) -> List[dict]:
        return bounded_mappings(v)

    @field_validator("subtotal", "tax", "tip", "total", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return non_negative_decimal(v)

    @field_validator("currency", mode="before")
    @classmethod
    def coerce_currency(cls, v: Any) -> str:
        return normalize_currency(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: Any) -> float:
        return clamp_confidence(v)

    @property
    def is_usable(self) -> bool:
        """Whether the extraction service managed to read the receipt"""
        return self.confidence > 0


class ParseTextRequest(CamelModel):
    """Raw text response from the extraction service"""

    text: str = Field(..., max_length=100_000)
