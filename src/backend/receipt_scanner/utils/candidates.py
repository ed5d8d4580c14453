"""
Candidate dataclasses for extraction scoring.

Each candidate represents a potential extracted value with the metadata
used to rank it against the other candidates for the same field.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class FieldExtraction(Generic[T]):
    """
    Result of extracting one field: an optional value and its confidence.

    A missing value always carries confidence 0.0.
    """
    value: Optional[T]
    confidence: float = 0.0
    pattern_name: Optional[str] = None

    def __post_init__(self):
        if self.value is None and self.confidence != 0.0:
            object.__setattr__(self, 'confidence', 0.0)
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")

    @classmethod
    def not_found(cls) -> 'FieldExtraction[Any]':
        return cls(value=None, confidence=0.0)

    @property
    def found(self) -> bool:
        return self.value is not None


@dataclass
class Candidate:
    """Base class for extraction candidates."""
    value: Any
    pattern_name: str
    confidence: float
    line_position: int  # 0-based OCR line index
    raw_text: str = ""  # Matched text, shown to reviewers
    order: int = 0  # Discovery order, used for stable tie-breaks


@dataclass
class MerchantCandidate(Candidate):
    """Candidate for extracted merchant name."""
    value: str


@dataclass
class AmountCandidate(Candidate):
    """Candidate for extracted amount."""
    value: Decimal


@dataclass
class DateCandidate(Candidate):
    """Candidate for extracted date."""
    value: datetime


# Helper functions for creating candidates

def create_merchant_candidate(
    value: str,
    pattern_name: str,
    line_position: int,
    confidence: float,
    raw_text: str,
    order: int
) -> MerchantCandidate:
    """
    Create MerchantCandidate from a matched line.

    Args:
        value: Trimmed merchant name
        pattern_name: Name of pattern that matched (or 'fallback_line')
        line_position: Line number the name came from
        confidence: Confidence assigned by the pattern table
        raw_text: Original line text
        order: Discovery index

    Returns:
        MerchantCandidate
    """
    return MerchantCandidate(
        value=value,
        pattern_name=pattern_name,
        confidence=confidence,
        line_position=line_position,
        raw_text=raw_text,
        order=order
    )


def create_amount_candidate(
    value: Decimal,
    pattern_name: str,
    line_position: int,
    confidence: float,
    raw_text: str,
    order: int
) -> AmountCandidate:
    """Create AmountCandidate for a parsed monetary match."""
    return AmountCandidate(
        value=value,
        pattern_name=pattern_name,
        confidence=confidence,
        line_position=line_position,
        raw_text=raw_text,
        order=order
    )


def create_date_candidate(
    value: datetime,
    pattern_name: str,
    line_position: int,
    confidence: float,
    raw_text: str,
    order: int
) -> DateCandidate:
    """Create DateCandidate for a successfully parsed date token."""
    return DateCandidate(
        value=value,
        pattern_name=pattern_name,
        confidence=confidence,
        line_position=line_position,
        raw_text=raw_text,
        order=order
    )
