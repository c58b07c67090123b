"""Test receipt payload validation"""

import re
from decimal import Decimal

import pytest

from billsplit.schemas.receipt import Receipt
from billsplit.services.bill_service import BillService
from billsplit.services.receipt_validator import (ReceiptValidator,
                                                  parse_receipt_response,
                                                  parse_receipt_response_safe)
from billsplit.services.summary_service import SummaryService

MALFORMED_PAYLOADS = [
    None,
    {},
    [],
    "not a receipt",
    42,
    3.5,
    True,
    [{"name": "Pizza", "price": 10}],
    {"items": "pizza"},
    {"items": {"name": "Pizza"}},
    {"items": [None, 1, "two", [3]]},
    {"items": [{"name": ["x"], "price": {"v": 1}, "quantity": [2]}]},
    {"merchantName": {"nested": {"deeper": [1, 2, 3]}}},
    {"subtotal": [], "tax": "NaN", "tip": "Infinity", "total": float("inf")},
    {"confidence": float("nan"), "currency": 123},
    {"items": [{"name": "<" * 500, "price": "-1e9", "quantity": "1e9"}]},
    {1: "numeric key", None: "none key", "tax": 3},
]


def assert_receipt_bounds(receipt: Receipt) -> None:
    """Check every Receipt invariant"""
    assert len(receipt.items) <= 100
    assert len(receipt.merchant_name) <= 200
    assert "<" not in receipt.merchant_name and ">" not in receipt.merchant_name
    for item in receipt.items:
        assert len(item.name) <= 200
        assert "<" not in item.name and ">" not in item.name
        assert 1 <= item.quantity <= 100
        assert item.price >= 0
    for amount in (receipt.subtotal, receipt.tax, receipt.tip, receipt.total):
        assert amount >= 0
    assert 0 <= receipt.confidence <= 1
    assert re.fullmatch(r"[A-Z]{3}", receipt.currency)


class TestParseSafe:
    """Test the never-failing entry point"""

    @pytest.mark.parametrize("payload", MALFORMED_PAYLOADS)
    def test_malformed_payload_yields_valid_receipt(self, payload):
        """Test any payload produces a receipt within bounds"""
        receipt = parse_receipt_response_safe(payload)

        assert isinstance(receipt, Receipt)
        assert_receipt_bounds(receipt)

    @pytest.mark.parametrize("payload", [None, [], "text", 42, True])
    def test_non_mapping_returns_empty_receipt(self, payload):
        """Test non-object payloads collapse to the empty receipt"""
        receipt = parse_receipt_response_safe(payload)

        assert receipt == ReceiptValidator.empty_receipt()
        assert receipt.confidence == 0
        assert receipt.items == []
        assert receipt.merchant_name == ""
        assert receipt.currency == "USD"
        assert receipt.total == Decimal("0")
        assert not receipt.is_usable

    def test_valid_payload(self, sample_receipt_payload):
        """Test a well-formed payload keeps its values"""
        receipt = parse_receipt_response_safe(sample_receipt_payload)

        assert receipt.merchant_name == "Luigi's Trattoria"
        assert [item.name for item in receipt.items] == [
            "Margherita Pizza", "Caesar Salad", "Sparkling Water"
        ]
        assert receipt.items[1].price == Decimal("12.00")
        assert receipt.items[2].quantity == 2
        assert receipt.subtotal == Decimal("40")
        assert receipt.total == Decimal("52")
        assert receipt.currency == "USD"
        assert receipt.confidence == pytest.approx(0.95)
        assert receipt.is_usable


class TestParseStrict:
    """Test the strict entry point"""

    @pytest.mark.parametrize("payload", [None, [], "text", 42, 1.5, [{"a": 1}]])
    def test_non_mapping_returns_none(self, payload):
        """Test only non-object payloads are rejected"""
        assert parse_receipt_response(payload) is None

    def test_empty_mapping_gets_defaults(self):
        """Test empty object is accepted with every default"""
        receipt = parse_receipt_response({})

        assert receipt is not None
        assert receipt.merchant_name == ""
        assert receipt.items == []
        assert receipt.subtotal == receipt.tax == receipt.tip == receipt.total == Decimal("0")
        assert receipt.currency == "USD"
        assert receipt.confidence == pytest.approx(0.8)

    def test_malformed_fields_do_not_fail(self):
        """Test field-level garbage is coerced rather than rejected"""
        receipt = parse_receipt_response({
            "merchantName": None,
            "items": [{"price": "abc", "quantity": "lots"}],
            "tax": -3,
            "currency": None,
            "confidence": "very sure",
        })

        assert receipt is not None
        assert receipt.items[0].name == "Unknown Item"
        assert receipt.items[0].price == Decimal("0")
        assert receipt.items[0].quantity == 1
        assert receipt.tax == Decimal("0")
        assert receipt.currency == "USD"
        assert receipt.confidence == pytest.approx(0.8)


class TestMerchantName:
    """Test merchant name sanitization"""

    def test_markup_stripped(self):
        """Test angle brackets are removed"""
        receipt = parse_receipt_response({"merchantName": "<b>Diner</b>"})
        assert receipt.merchant_name == "bDiner/b"

    def test_truncated_to_200(self):
        """Test long names are cut to 200 characters"""
        receipt = parse_receipt_response({"merchantName": "x" * 250})
        assert receipt.merchant_name == "x" * 200

    def test_truncated_before_stripping(self):
        """Test truncation happens before markup removal"""
        receipt = parse_receipt_response({"merchantName": "a" * 199 + "<bc"})
        assert receipt.merchant_name == "a" * 199

    def test_numeric_name_rendered_as_text(self):
        """Test a numeric merchant name is kept as text"""
        receipt = parse_receipt_response({"merchantName": 7})
        assert receipt.merchant_name == "7"


class TestItems:
    """Test item list coercion"""

    def test_missing_items(self):
        """Test missing items gives empty list"""
        assert parse_receipt_response({"merchantName": "x"}).items == []

    def test_non_array_items(self):
        """Test non-array items gives empty list"""
        assert parse_receipt_response({"items": {"name": "Tea"}}).items == []

    def test_truncated_to_100(self):
        """Test only the first 100 items are kept"""
        payload = {"items": [{"name": f"Item {i}", "price": 1} for i in range(150)]}

        receipt = parse_receipt_response(payload)

        assert len(receipt.items) == 100
        assert receipt.items[0].name == "Item 0"
        assert receipt.items[-1].name == "Item 99"

    def test_non_object_entries_dropped(self):
        """Test entries that are not objects are skipped"""
        receipt = parse_receipt_response({"items": ["Tea", 3, None, {"name": "Coffee"}]})

        assert [item.name for item in receipt.items] == ["Coffee"]

    def test_missing_name_defaults(self):
        """Test items without a name are called Unknown Item"""
        receipt = parse_receipt_response({"items": [{"price": 4}, {"name": "   "}]})

        assert [item.name for item in receipt.items] == ["Unknown Item", "Unknown Item"]

    def test_name_sanitized(self):
        """Test item names get the same truncate and strip treatment"""
        receipt = parse_receipt_response({
            "items": [{"name": "<script>alert(1)</script>"}, {"name": "y" * 300}]
        })

        assert receipt.items[0].name == "scriptalert(1)/script"
        assert receipt.items[1].name == "y" * 200

    @pytest.mark.parametrize("price,expected", [
        (12.5, Decimal("12.5")),
        ("7.25", Decimal("7.25")),
        (" 3 ", Decimal("3")),
        (0, Decimal("0")),
        (-4, Decimal("0")),
        ("-0.01", Decimal("0")),
        ("free", Decimal("0")),
        (None, Decimal("0")),
        (True, Decimal("0")),
        ("NaN", Decimal("0")),
        (float("inf"), Decimal("0")),
        ("9e999999", Decimal("0")),
        ("1e15", Decimal("0")),
        ("999999999999999.99", Decimal("999999999999999.99")),
    ])
    def test_price_coercion(self, price, expected):
        """Test price becomes a non-negative number"""
        receipt = parse_receipt_response({"items": [{"name": "Tea", "price": price}]})
        assert receipt.items[0].price == expected

    @pytest.mark.parametrize("quantity,expected", [
        (3, 3),
        ("4", 4),
        (2.7, 2),
        (0, 1),
        (-5, 1),
        (101, 100),
        (10 ** 9, 100),
        ("many", 1),
        (None, 1),
        ([2], 1),
    ])
    def test_quantity_coercion(self, quantity, expected):
        """Test quantity becomes an integer in [1, 100]"""
        receipt = parse_receipt_response({"items": [{"name": "Tea", "quantity": quantity}]})
        assert receipt.items[0].quantity == expected

    def test_missing_quantity_defaults_to_one(self):
        """Test quantity defaults to 1"""
        receipt = parse_receipt_response({"items": [{"name": "Tea"}]})
        assert receipt.items[0].quantity == 1


class TestAmounts:
    """Test bill-level amount coercion"""

    @pytest.mark.parametrize("field", ["subtotal", "tax", "tip", "total"])
    def test_negative_becomes_zero(self, field):
        receipt = parse_receipt_response({field: -10})
        assert getattr(receipt, field) == Decimal("0")

    @pytest.mark.parametrize("field", ["subtotal", "tax", "tip", "total"])
    def test_huge_amount_becomes_zero(self, field):
        receipt = parse_receipt_response({field: "9e999999"})
        assert getattr(receipt, field) == Decimal("0")

    @pytest.mark.parametrize("field", ["subtotal", "tax", "tip", "total"])
    def test_numeric_string_accepted(self, field):
        receipt = parse_receipt_response({field: "19.99"})
        assert getattr(receipt, field) == Decimal("19.99")

    def test_amounts_not_reconciled(self):
        """Test totals are kept as reported even when they disagree"""
        receipt = parse_receipt_response({
            "items": [{"name": "Tea", "price": 5}],
            "subtotal": 100,
            "total": 3,
        })

        assert receipt.subtotal == Decimal("100")
        assert receipt.total == Decimal("3")


class TestCurrency:
    """Test currency normalization"""

    @pytest.mark.parametrize("currency,expected", [
        ("eur", "EUR"),
        ("IDR", "IDR"),
        (" gbp ", "GBP"),
        ("12X", "USD"),
        ("EURO", "USD"),
        ("€", "USD"),
        ("", "USD"),
        (None, "USD"),
        (840, "USD"),
    ])
    def test_currency(self, currency, expected):
        receipt = parse_receipt_response({"currency": currency})
        assert receipt.currency == expected

    def test_missing_currency(self):
        assert parse_receipt_response({}).currency == "USD"


class TestConfidence:
    """Test confidence clamping"""

    @pytest.mark.parametrize("confidence,expected", [
        (0.42, 0.42),
        ("0.9", 0.9),
        (0, 0.0),
        (1.7, 1.0),
        (-0.3, 0.0),
        ("unsure", 0.8),
        (None, 0.8),
        ([1], 0.8),
    ])
    def test_confidence(self, confidence, expected):
        receipt = parse_receipt_response({"confidence": confidence})
        assert receipt.confidence == pytest.approx(expected)

    def test_explicit_zero_marks_unusable(self):
        """Test the extraction service's zero confidence is preserved"""
        receipt = parse_receipt_response({"confidence": 0, "items": [{"name": "Tea"}]})

        assert receipt.confidence == 0
        assert not receipt.is_usable


class TestSerialization:
    """Test receipt JSON shape"""

    def test_camel_case_keys(self, sample_receipt_payload):
        receipt = parse_receipt_response(sample_receipt_payload)

        data = receipt.model_dump(mode="json", by_alias=True)

        assert set(data) == {
            "merchantName", "items", "subtotal", "tax", "tip", "total",
            "currency", "confidence",
        }
        assert set(data["items"][0]) == {"name", "price", "quantity"}


EXTREME_NUMBERS = ["9e999999", "1e-999999", "1e99999999999999999999"]
ITEM_FIELDS = ["price", "quantity"]
RECEIPT_FIELDS = ["subtotal", "tax", "tip", "total", "confidence"]


def build_payload(field: str, value: str) -> dict:
    """Receipt payload with one numeric field replaced"""
    item = {"name": "Tea", "price": "4.50", "quantity": 2}
    payload = {
        "items": [item, {"name": "Cake", "price": "3"}],
        "subtotal": "12",
        "tax": "1.20",
        "tip": "2",
        "total": "15.20",
    }
    if field in ITEM_FIELDS:
        item[field] = value
    else:
        payload[field] = value
    return payload


class TestExtremeMagnitudes:
    """Test extreme numbers are safe all the way to the split"""

    @pytest.mark.parametrize("value", EXTREME_NUMBERS)
    @pytest.mark.parametrize("field", ITEM_FIELDS + RECEIPT_FIELDS)
    def test_validated_receipt_can_be_split(self, field, value):
        """Test a validated receipt always produces finite summaries"""
        receipt = parse_receipt_response_safe(build_payload(field, value))
        assert_receipt_bounds(receipt)

        session = BillService.from_receipt(receipt)
        session = BillService.add_participant(session, "Alice")
        session = BillService.add_participant(session, "Bob")
        alice, bob = [p.id for p in session.participants]
        tea, cake = session.items
        session = BillService.assign_item(session, tea.id, [alice, bob])
        session = BillService.assign_item(session, cake.id, [alice])

        summaries = BillService.calculate(session)

        assert len(summaries) == 2
        for summary in summaries:
            for amount in (summary.items_total, summary.tax_share,
                           summary.tip_share, summary.grand_total):
                assert amount.is_finite()
                assert amount >= 0
        assert SummaryService.build_summary_text(session, summaries)

    @pytest.mark.parametrize("value", ["9e999999", "1e99999999999999999999"])
    def test_huge_price_treated_as_unreadable(self, value):
        receipt = parse_receipt_response_safe(build_payload("price", value))
        assert receipt.items[0].price == Decimal("0")
