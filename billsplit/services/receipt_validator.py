"""Receipt response validation"""
import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from billsplit.schemas.receipt import Receipt
from billsplit.utils.coercion import string_keyed

logger = logging.getLogger(__name__)


class ReceiptValidator:
    """Turns untrusted extraction service output into a bounded Receipt"""

    @staticmethod
    def empty_receipt() -> Receipt:
        """Canonical receipt for output that could not be read at all"""
        return Receipt(confidence=0)

    @staticmethod
    def parse(data: Any) -> Optional[Receipt]:
        """
        Validate a payload, coercing every field into range.

        Field content never causes a failure: missing, malformed or
        out-of-range values fall back to defaults, are clamped or truncated.

        Args:
            data: Value decoded from the extraction service response

        Returns:
            Validated receipt, or None if data is not a mapping
        """
        if not isinstance(data, Mapping):
            logger.debug("Receipt payload is %s, not a mapping", type(data).__name__)
            return None

        try:
            return Receipt.model_validate(string_keyed(data))
        except PydanticValidationError as e:
            logger.warning("Receipt payload rejected after coercion: %s", e)
            return None

    @staticmethod
    def parse_safe(data: Any) -> Receipt:
        """
        Validate a payload without ever failing.

        Args:
            data: Value decoded from the extraction service response

        Returns:
            Validated receipt, or the empty receipt with confidence 0
        """
        receipt = ReceiptValidator.parse(data)
        if receipt is None:
            logger.warning("Unreadable receipt payload, returning empty receipt")
            return ReceiptValidator.empty_receipt()
        return receipt


def parse_receipt_response(data: Any) -> Optional[Receipt]:
    """Strict entry point: None only when data is not a mapping"""
    return ReceiptValidator.parse(data)


def parse_receipt_response_safe(data: Any) -> Receipt:
    """Safe entry point: always returns a Receipt"""
    return ReceiptValidator.parse_safe(data)
