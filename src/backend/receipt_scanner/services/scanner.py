"""
Scanner service: OCR followed by receipt parsing.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from receipt_scanner.models.receipt import ScannedReceipt
from receipt_scanner.services.ocr import OCRService
from receipt_scanner.services.parser import ReceiptParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOutcome:
    """Result of a scan; OCR failure is reported before any parsing happens."""
    success: bool
    receipt: Optional[ScannedReceipt] = None
    error_message: Optional[str] = None


class ReceiptScannerService:
    """Runs OCR on a receipt image and parses the recognized lines."""

    def __init__(
        self,
        ocr: Optional[OCRService] = None,
        parser: Optional[ReceiptParser] = None
    ):
        self.ocr = ocr or OCRService()
        self.parser = parser or ReceiptParser()

    def scan_image(self, image_data: bytes) -> ScanOutcome:
        if not image_data:
            return ScanOutcome(success=False, error_message="Empty image")

        lines = self.ocr.extract_lines(image_data)
        if lines is None:
            return ScanOutcome(success=False, error_message="Failed to scan receipt: text recognition failed")

        return self.scan_lines(lines)

    def scan_lines(self, lines: Sequence[str]) -> ScanOutcome:
        receipt = self.parser.parse(lines)
        logger.info("Receipt scanned", extra={
            "line_count": len(receipt.raw_text),
            "merchant": receipt.merchant,
            "overall_confidence": round(receipt.confidence.overall, 2),
        })
        return ScanOutcome(success=True, receipt=receipt)
