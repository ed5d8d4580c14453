"""
Receipt parser service for extracting structured data from OCR lines.
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from receipt_scanner.models.receipt import ReceiptConfidence, ScannedReceipt
from receipt_scanner.services.categorizer import CategoryClassifier
from receipt_scanner.utils.money import parse_money, is_plausible_amount
from receipt_scanner.utils.candidates import (
    AmountCandidate,
    DateCandidate,
    FieldExtraction,
    MerchantCandidate,
    create_amount_candidate,
    create_date_candidate,
    create_merchant_candidate,
)
from receipt_scanner.utils.scoring import (
    dedupe_by_value,
    select_best_candidate,
    select_first_candidate,
    select_top_candidates,
    to_extraction,
)

logger = logging.getLogger(__name__)


class InvalidReceiptInput(ValueError):
    """Raised when the parser is handed something other than a sequence of lines."""


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with its confidence weight and an example."""
    name: str
    pattern: str
    example: str
    confidence: float = 0.0
    notes: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


# Numeric money token: leading digit, optional grouping commas, up to 2 decimals
_AMOUNT_NUMBER = r'(\d[\d,]*(?:\.\d{1,2})?)'

_MONTH_NAMES = (
    r'(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?'
    r'|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?'
)


class ReceiptParser:
    """Service for parsing receipt lines and extracting structured data."""

    # Merchants are expected near the top of a receipt
    MERCHANT_SCAN_LINES = 5
    MERCHANT_BASE_CONFIDENCE = 0.9
    MERCHANT_LINE_PENALTY = 0.1
    MERCHANT_FALLBACK_CONFIDENCE = 0.5
    MERCHANT_MIN_MATCH_LENGTH = 3

    DATE_CONFIDENCE = 0.8
    DATE_FALLBACK_CONFIDENCE = 0.3

    # strptime formats tried in order; %m and %d accept one or two digits
    DATE_FORMATS = (
        '%m/%d/%Y',
        '%m/%d/%y',
        '%Y/%m/%d',
        '%b %d, %Y',
        '%b %d %Y',
    )

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        categorizer: Optional[CategoryClassifier] = None
    ):
        """
        Initialize parser with regex patterns.

        Args:
            clock: Returns "now"; used when no date can be read from the receipt
            categorizer: Category classifier fed with the extracted merchant
        """
        self.clock = clock
        self.categorizer = categorizer or CategoryClassifier()
        self._init_patterns()

    def _init_patterns(self):
        """Initialize ordered pattern tables, most specific first."""

        self.merchant_patterns = [
            PatternSpec(
                name='chain_store',
                pattern=r"\b(STARBUCKS|MCDONALD['’]?S|WALMART|TARGET|AMAZON|COSTCO|SAFEWAY|CVS|WALGREENS)\b",
                example='STARBUCKS COFFEE #1024',
                notes='Well-known chains',
            ),
            PatternSpec(
                name='business_name',
                pattern=r'^[A-Z][A-Z\s&]{2,30}(?=\s|$)',
                example='JOE & SONS HARDWARE',
                notes='Letters, spaces and & at line start',
            ),
            PatternSpec(
                name='store_with_number',
                pattern=r'^[A-Z][A-Z\s&]{2,20}\s+#?\d+',
                example='CORNER DELI #12',
                notes='Store name followed by location number',
            ),
        ]

        self.amount_patterns = [
            PatternSpec(
                name='total_label',
                pattern=r'(?<!sub)(?<!sub )(?<!sub-)total(?![a-z]).*?' + _AMOUNT_NUMBER,
                example='TOTAL: $12.50',
                confidence=0.9,
                notes='Excludes subtotal; tolerates OCR-glued TOTAL12.50',
            ),
            PatternSpec(
                name='amount_label',
                pattern=r'\bamount\b.*?' + _AMOUNT_NUMBER,
                example='Amount Due 12.50',
                confidence=0.8,
            ),
            PatternSpec(
                name='subtotal_label',
                pattern=r'\bsub[\s-]?total\b.*?' + _AMOUNT_NUMBER,
                example='Subtotal: $10.00',
                confidence=0.8,
            ),
            PatternSpec(
                name='dollar_sign',
                pattern=r'\$\s*' + _AMOUNT_NUMBER,
                example='$4.50',
                confidence=0.7,
            ),
            PatternSpec(
                name='bare_decimal',
                pattern=r'\b(\d[\d,]*\.\d{2})\b',
                example='4.50',
                confidence=0.5,
                notes='No currency symbol, lowest priority',
            ),
        ]

        self.date_patterns = [
            PatternSpec(
                name='month_day_year',
                pattern=r'\b(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})\b',
                example='03/14/2024',
                confidence=self.DATE_CONFIDENCE,
            ),
            PatternSpec(
                name='year_month_day',
                pattern=r'\b(\d{2,4})[/\-](\d{1,2})[/\-](\d{1,2})\b',
                example='2024-03-14',
                confidence=self.DATE_CONFIDENCE,
            ),
            PatternSpec(
                name='month_name',
                pattern=r'\b' + _MONTH_NAMES + r'\s+(\d{1,2}),?\s+(\d{2,4})\b',
                example='Mar 14, 2024',
                confidence=self.DATE_CONFIDENCE,
            ),
        ]

    @staticmethod
    def _validate_lines(lines: Any) -> List[str]:
        if lines is None:
            raise InvalidReceiptInput("Receipt lines must not be None")
        if isinstance(lines, (str, bytes)):
            raise InvalidReceiptInput("Receipt lines must be a sequence of strings, not a single string")
        validated = list(lines)
        for index, line in enumerate(validated):
            if not isinstance(line, str):
                raise InvalidReceiptInput(f"Line {index} is {type(line).__name__}, expected str")
        return validated

    def parse(self, lines: Sequence[str]) -> ScannedReceipt:
        """
        Parse receipt lines and extract all available fields.

        Args:
            lines: OCR text lines, top to bottom

        Returns:
            ScannedReceipt with fields, confidences and a copy of the input
        """
        lines = self._validate_lines(lines)

        merchant = self.extract_merchant(lines)
        amount = self.extract_amount(lines)
        date = self.extract_date(lines)
        category = self.categorizer.classify(merchant.value)

        confidence = ReceiptConfidence(
            merchant=merchant.confidence,
            amount=amount.confidence,
            date=date.confidence,
        )

        receipt = ScannedReceipt(
            merchant=merchant.value,
            amount=amount.value,
            date=date.value,
            category=category,
            confidence=confidence,
            raw_text=tuple(lines),
        )

        logger.debug(
            "Parsed receipt: merchant=%s amount=%s date=%s category=%s overall=%.2f",
            receipt.merchant, receipt.amount, receipt.date, receipt.category,
            confidence.overall
        )
        return receipt

    def parse_text(self, text: str) -> ScannedReceipt:
        """Parse a plain OCR text blob, one receipt line per text line."""
        if text is None:
            raise InvalidReceiptInput("Receipt text must not be None")
        return self.parse(split_lines(text))

    # Merchant

    def _merchant_candidates(self, lines: List[str]) -> List[MerchantCandidate]:
        """
        Collect merchant candidates from the leading lines.

        Patterns are tried in table order, each over the leading lines top to
        bottom, so an allow-listed chain lower down still beats a generic
        business-name line above it. Fallback candidates come last.
        """
        top_lines = [line.strip() for line in lines[:self.MERCHANT_SCAN_LINES]]
        candidates: List[MerchantCandidate] = []

        for spec in self.merchant_patterns:
            for index, clean_line in enumerate(top_lines):
                match = spec.compiled.search(clean_line)
                if not match:
                    continue

                name = match.group(0).strip()
                if len(name) < self.MERCHANT_MIN_MATCH_LENGTH:
                    continue

                confidence = round(
                    self.MERCHANT_BASE_CONFIDENCE - self.MERCHANT_LINE_PENALTY * index, 2
                )
                candidates.append(create_merchant_candidate(
                    value=name,
                    pattern_name=spec.name,
                    line_position=index,
                    confidence=max(0.0, confidence),
                    raw_text=clean_line,
                    order=len(candidates),
                ))

        # Fallback: a plain line that looks like a name (no digits, sane length)
        for index, clean_line in enumerate(top_lines):
            if 3 < len(clean_line) < 50 and not re.search(r'\d', clean_line):
                candidates.append(create_merchant_candidate(
                    value=clean_line,
                    pattern_name='fallback_line',
                    line_position=index,
                    confidence=self.MERCHANT_FALLBACK_CONFIDENCE,
                    raw_text=clean_line,
                    order=len(candidates),
                ))

        return candidates

    def extract_merchant(self, lines: Sequence[str]) -> FieldExtraction:
        """
        Extract merchant name from the top of the receipt.

        Returns:
            FieldExtraction with the merchant name, or not found
        """
        lines = self._validate_lines(lines)
        best = select_first_candidate(self._merchant_candidates(lines))

        if best is not None:
            logger.debug(
                "Merchant %r from %s on line %d (confidence %.2f)",
                best.value, best.pattern_name, best.line_position, best.confidence
            )
        return to_extraction(best)

    # Amount

    def _amount_candidates(self, lines: List[str]) -> List[AmountCandidate]:
        """Collect every plausible amount in line order, then pattern order."""
        candidates: List[AmountCandidate] = []

        for index, line in enumerate(lines):
            clean_line = line.strip()
            if not clean_line:
                continue

            for spec in self.amount_patterns:
                for match in spec.compiled.finditer(clean_line):
                    amount = parse_money(match.group(1))
                    if not is_plausible_amount(amount):
                        continue

                    candidates.append(create_amount_candidate(
                        value=amount,
                        pattern_name=spec.name,
                        line_position=index,
                        confidence=spec.confidence,
                        raw_text=match.group(0),
                        order=len(candidates),
                    ))

        return dedupe_by_value(candidates)

    def extract_amount(self, lines: Sequence[str]) -> FieldExtraction:
        """
        Extract the transaction amount, preferring the most label-specific match.

        Returns:
            FieldExtraction with a Decimal amount, or not found
        """
        lines = self._validate_lines(lines)
        candidates = self._amount_candidates(lines)
        best = select_best_candidate(candidates)

        if best is not None:
            logger.debug(
                "Amount %s from %s on line %d (confidence %.2f, %d candidates)",
                best.value, best.pattern_name, best.line_position, best.confidence,
                len(candidates)
            )
        return to_extraction(best)

    # Date

    def _date_candidates(self, lines: List[str]) -> List[DateCandidate]:
        """Collect parseable dates, first match per line and pattern."""
        candidates: List[DateCandidate] = []

        for index, line in enumerate(lines):
            clean_line = line.strip()
            if not clean_line:
                continue

            for spec in self.date_patterns:
                match = spec.compiled.search(clean_line)
                if not match:
                    continue

                if spec.name == 'month_name':
                    token = f"{match.group(1)[:3]} {match.group(2)}, {match.group(3)}"
                else:
                    token = match.group(0).replace('-', '/')

                value = self._parse_date_string(token)
                if value is None:
                    continue

                candidates.append(create_date_candidate(
                    value=value,
                    pattern_name=spec.name,
                    line_position=index,
                    confidence=spec.confidence,
                    raw_text=match.group(0),
                    order=len(candidates),
                ))

        return candidates

    def _parse_date_string(self, date_str: str) -> Optional[datetime]:
        """
        Parse a date token against the fixed format list.

        Returns:
            datetime for the first format that parses, or None
        """
        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(date_str.strip(), fmt)
            except ValueError:
                continue

        return None

    def extract_date(self, lines: Sequence[str]) -> FieldExtraction:
        """
        Extract the transaction date, falling back to the current time.

        Never returns not found: the fallback carries low confidence so the
        caller knows to ask for confirmation.
        """
        lines = self._validate_lines(lines)
        best = select_first_candidate(self._date_candidates(lines))

        if best is None:
            logger.debug("No date found, falling back to clock")
            return FieldExtraction(
                value=self.clock(),
                confidence=self.DATE_FALLBACK_CONFIDENCE,
                pattern_name='fallback_now'
            )

        logger.debug("Date %s from %s on line %d", best.value, best.pattern_name, best.line_position)
        return to_extraction(best)

    # Review

    def review_candidates(self, lines: Sequence[str], top_n: int = 3) -> Dict[str, List[Dict[str, Any]]]:
        """
        Capture top candidates for each field to present in a review UI.

        Args:
            lines: OCR text lines
            top_n: Number of alternatives per field

        Returns:
            {'merchant': [...], 'amount': [...], 'date': [...]} where each
            option is a dict with value, confidence, pattern, line and the
            matched text. The
            value parse() picked comes first, then distinct alternatives by
            confidence.
        """
        lines = self._validate_lines(lines)
        merchants = self._merchant_candidates(lines)
        amounts = self._amount_candidates(lines)
        dates = self._date_candidates(lines)

        pools = {
            'merchant': (merchants, select_first_candidate(merchants)),
            'amount': (amounts, select_best_candidate(amounts)),
            'date': (dates, select_first_candidate(dates)),
        }

        return {
            field_name: [
                {
                    'value': c.value,
                    'confidence': c.confidence,
                    'pattern': c.pattern_name,
                    'line': c.line_position,
                    'text': c.raw_text,
                }
                for c in select_top_candidates(candidates, top_n, selected=selected)
            ]
            for field_name, (candidates, selected) in pools.items()
        }


def split_lines(text: str) -> List[str]:
    """Split OCR text into trimmed, non-blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]
