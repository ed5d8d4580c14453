"""
Scan API router: parse OCR lines or uploaded receipt images.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool
import logging

from receipt_scanner.config import settings
from receipt_scanner.models.receipt import ScanResponse, ScanTextRequest, ScannedReceipt
from receipt_scanner.services.parser import InvalidReceiptInput, ReceiptParser
from receipt_scanner.services.scanner import ReceiptScannerService

router = APIRouter(prefix="/scan", tags=["scan"])
logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png"]


def _build_response(parser: ReceiptParser, receipt: ScannedReceipt) -> ScanResponse:
    """Attach review candidates when the receipt is not high confidence."""
    review_candidates = {}
    if receipt.needs_review:
        review_candidates = parser.review_candidates(receipt.raw_text)

    return ScanResponse(
        receipt=receipt,
        needs_review=receipt.needs_review,
        review_candidates=review_candidates,
    )


@router.post("/text", response_model=ScanResponse)
async def scan_text(request: ScanTextRequest):
    """
    Parse lines that were already recognized by an OCR engine.

    Args:
        request: OCR lines, top to bottom

    Returns:
        Extracted receipt fields with confidence and review candidates
    """
    parser = ReceiptParser()
    try:
        receipt = parser.parse(request.lines)
    except InvalidReceiptInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Parsed receipt text", extra={
        "line_count": len(request.lines),
        "overall_confidence": round(receipt.confidence.overall, 2),
    })
    return _build_response(parser, receipt)


@router.post("/image", response_model=ScanResponse)
async def scan_image(file: UploadFile = File(...)):
    """
    Scan an uploaded receipt photo.

    This endpoint:
    1. Validates type (JPG, PNG) and size
    2. Runs OCR in a worker thread
    3. Parses the recognized lines

    Returns:
        Extracted receipt fields with confidence and review candidates
    """
    try:
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type: {file.content_type}. Allowed: JPG, PNG"
            )

        image_data = await file.read()
        file_size_mb = len(image_data) / (1024 * 1024)

        if file_size_mb > settings.MAX_UPLOAD_MB:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB}MB"
            )

        scanner = ReceiptScannerService()
        outcome = await run_in_threadpool(scanner.scan_image, image_data)

        if not outcome.success:
            logger.info("Receipt scan failed", extra={
                "filename": file.filename,
                "error": outcome.error_message,
            })
            raise HTTPException(status_code=422, detail=outcome.error_message)

        return _build_response(scanner.parser, outcome.receipt)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected error scanning receipt image")
        raise HTTPException(status_code=500, detail=f"Scan failed: {str(e)}")
