"""
Pydantic models for scanned receipts.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
from decimal import Decimal

# Overall confidence at or above this needs no user re-verification
HIGH_CONFIDENCE_THRESHOLD = 0.7


class ReceiptConfidence(BaseModel):
    """Per-field confidence scores; overall is always the mean of the three."""
    model_config = ConfigDict(frozen=True)

    merchant: float = Field(default=0.0, ge=0.0, le=1.0)
    amount: float = Field(default=0.0, ge=0.0, le=1.0)
    date: float = Field(default=0.0, ge=0.0, le=1.0)

    @computed_field
    @property
    def overall(self) -> float:
        return (self.merchant + self.amount + self.date) / 3.0


class ScannedReceipt(BaseModel):
    """Fields extracted from one receipt, plus the OCR lines they came from."""
    model_config = ConfigDict(frozen=True)

    merchant: Optional[str] = None
    amount: Optional[Decimal] = None
    date: Optional[datetime] = None
    category: Optional[str] = None
    confidence: ReceiptConfidence = Field(default_factory=ReceiptConfidence)
    raw_text: Tuple[str, ...] = ()

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence.overall >= HIGH_CONFIDENCE_THRESHOLD

    @property
    def needs_review(self) -> bool:
        return not self.is_high_confidence


class ScanTextRequest(BaseModel):
    """Request model for parsing already-recognized OCR lines."""
    lines: List[str]


class ReviewCandidate(BaseModel):
    """One alternative value offered to the reviewer."""
    value: Any
    confidence: float
    pattern: str
    line: int
    text: str = ""


class ScanResponse(BaseModel):
    """Model for scan API responses."""
    receipt: ScannedReceipt
    needs_review: bool
    review_candidates: Dict[str, List[ReviewCandidate]] = {}
