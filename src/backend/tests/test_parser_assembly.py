"""
Tests for ReceiptParser.parse: assembling the four extractions.

Tests cover:
- Invariants that hold for every input (overall mean, date present,
  amount bounds, confidence range)
- Idempotence with a fixed clock
- Empty input and invalid input
- Review candidates for low-confidence receipts
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from receipt_scanner.services.parser import ReceiptParser, InvalidReceiptInput, split_lines
from datetime import datetime
from decimal import Decimal
import pytest

FIXED_NOW = datetime(2030, 1, 1, 9, 30)


STARBUCKS_RECEIPT = [
    "STARBUCKS COFFEE #1024",
    "123 Main St",
    "Seattle WA",
    "03/14/2024 08:12 AM",
    "Grande Latte 4.95",
    "Subtotal $4.95",
    "Tax $0.50",
    "TOTAL $5.45",
]

GROCERY_RECEIPT = [
    "** Welcome **",
    "WHOLE FOODS MARKET #452",
    "Austin TX",
    "Bananas 1.29",
    "Milk 3.49",
    "Subtotal: 4.78",
    "Total: $4.78",
    "Mar 14, 2024",
]

NOISY_RECEIPT = [
    "~~ ## ~~",
    "",
    "1 2 3 4 5",
    "Order 99999.99",
    "Thank you!",
]

SAMPLES = [STARBUCKS_RECEIPT, GROCERY_RECEIPT, NOISY_RECEIPT, [], ["$"], ["Total: $0.00"]]


@pytest.fixture
def parser():
    return ReceiptParser(clock=lambda: FIXED_NOW)


class TestParseReceipts:
    """End-to-end parse of realistic line sets."""

    def test_starbucks_receipt(self, parser):
        receipt = parser.parse(STARBUCKS_RECEIPT)

        assert receipt.merchant == "STARBUCKS"
        assert receipt.amount == Decimal('5.45')
        assert receipt.date == datetime(2024, 3, 14)
        assert receipt.category == "Food & Dining"
        assert receipt.confidence.merchant == pytest.approx(0.9)
        assert receipt.confidence.amount == pytest.approx(0.9)
        assert receipt.confidence.date == pytest.approx(0.8)
        assert receipt.is_high_confidence
        assert receipt.raw_text == tuple(STARBUCKS_RECEIPT)

    def test_grocery_receipt(self, parser):
        receipt = parser.parse(GROCERY_RECEIPT)

        assert receipt.merchant == "WHOLE FOODS MARKET"
        assert receipt.confidence.merchant == pytest.approx(0.8)
        assert receipt.amount == Decimal('4.78')
        assert receipt.date == datetime(2024, 3, 14)
        assert receipt.category == "Groceries"

    def test_mixed_case_grocery_header(self, parser):
        receipt = parser.parse(["Whole Foods Market #452", "Austin TX 78701", "Total: $4.78"])

        assert receipt.merchant == "Whole Foods Market"
        assert receipt.confidence.merchant == pytest.approx(0.9)
        assert receipt.category == "Groceries"
        assert receipt.amount == Decimal('4.78')

    def test_chain_below_generic_line(self, parser):
        receipt = parser.parse(["RANDOM NOISE LINE", "STARBUCKS", "123 Main St", "Total: $4.50"])

        assert receipt.merchant == "STARBUCKS"
        assert receipt.confidence.merchant == pytest.approx(0.8)
        assert receipt.amount == Decimal('4.50')
        assert receipt.confidence.amount == pytest.approx(0.9)

    def test_empty_input(self, parser):
        receipt = parser.parse([])

        assert receipt.merchant is None
        assert receipt.amount is None
        assert receipt.category is None
        assert receipt.date == FIXED_NOW
        assert receipt.confidence.merchant == 0.0
        assert receipt.confidence.amount == 0.0
        assert receipt.confidence.date == pytest.approx(0.3)
        assert receipt.confidence.overall == pytest.approx(0.1)
        assert receipt.raw_text == ()

    def test_accepts_tuple_input(self, parser):
        assert parser.parse(tuple(STARBUCKS_RECEIPT)) == parser.parse(STARBUCKS_RECEIPT)


class TestParseInvariants:
    """Properties that hold for every input."""

    @pytest.mark.parametrize("lines", SAMPLES)
    def test_overall_is_mean(self, parser, lines):
        c = parser.parse(lines).confidence

        assert c.overall == pytest.approx((c.merchant + c.amount + c.date) / 3)

    @pytest.mark.parametrize("lines", SAMPLES)
    def test_date_never_missing(self, parser, lines):
        assert parser.parse(lines).date is not None

    @pytest.mark.parametrize("lines", SAMPLES)
    def test_amount_within_bounds(self, parser, lines):
        amount = parser.parse(lines).amount

        assert amount is None or Decimal('0') < amount < Decimal('10000')

    @pytest.mark.parametrize("lines", SAMPLES)
    def test_confidences_in_range(self, parser, lines):
        c = parser.parse(lines).confidence

        for value in (c.merchant, c.amount, c.date, c.overall):
            assert 0.0 <= value <= 1.0

    @pytest.mark.parametrize("lines", SAMPLES)
    def test_idempotent(self, parser, lines):
        assert parser.parse(lines) == parser.parse(lines)


class TestInvalidInput:
    """Only a missing line sequence is an error; empty is fine."""

    def test_none_rejected(self, parser):
        with pytest.raises(InvalidReceiptInput):
            parser.parse(None)

    def test_bare_string_rejected(self, parser):
        with pytest.raises(InvalidReceiptInput):
            parser.parse("STARBUCKS\nTotal: $4.50")

    def test_non_string_line_rejected(self, parser):
        with pytest.raises(InvalidReceiptInput):
            parser.parse(["STARBUCKS", 4.5])

    def test_is_a_value_error(self):
        assert issubclass(InvalidReceiptInput, ValueError)

    def test_extractors_validate_too(self, parser):
        with pytest.raises(InvalidReceiptInput):
            parser.extract_amount(None)


class TestParseText:
    """Plain OCR text is split into lines first."""

    def test_parse_text(self, parser):
        receipt = parser.parse_text("  STARBUCKS  \n\n Total: $4.50 \n03/14/2024\n")

        assert receipt.merchant == "STARBUCKS"
        assert receipt.amount == Decimal('4.50')
        assert receipt.raw_text == ("STARBUCKS", "Total: $4.50", "03/14/2024")

    def test_split_lines_drops_blanks(self):
        assert split_lines("a\n\n  \n b \r\nc") == ["a", "b", "c"]

    def test_parse_text_none_rejected(self, parser):
        with pytest.raises(InvalidReceiptInput):
            parser.parse_text(None)


class TestReviewCandidates:
    """Alternatives offered when a field may be wrong."""

    def test_amount_options_ranked(self, parser):
        lines = ["Subtotal: $10.00", "Tax: $0.80", "Total: $10.80"]

        options = parser.review_candidates(lines)['amount']

        assert [o['value'] for o in options] == [Decimal('10.80'), Decimal('10.00'), Decimal('0.80')]
        assert [o['confidence'] for o in options] == [0.9, 0.8, 0.7]
        assert options[0]['pattern'] == 'total_label'
        assert options[0]['line'] == 2
        assert options[0]['text'] == "Total: $10.80"

    def test_selected_merchant_listed_first(self, parser):
        lines = ["RANDOM NOISE LINE", "STARBUCKS", "123 Main St", "Total: $4.50"]

        options = parser.review_candidates(lines)['merchant']

        assert [o['value'] for o in options] == ["STARBUCKS", "RANDOM NOISE LINE"]
        assert options[1]['confidence'] == pytest.approx(0.9)

    def test_top_n_limits_options(self, parser):
        lines = ["$1.00", "$2.00", "$3.00", "$4.00"]

        options = parser.review_candidates(lines, top_n=2)['amount']

        assert [o['value'] for o in options] == [Decimal('1.00'), Decimal('2.00')]

    def test_empty_input_has_no_options(self, parser):
        assert parser.review_candidates([]) == {'merchant': [], 'amount': [], 'date': []}
