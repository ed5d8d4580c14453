"""
OCR service for turning receipt images into text lines.
"""

import io
import logging
from typing import List, Optional

import pytesseract
from PIL import Image, ImageEnhance, UnidentifiedImageError

from receipt_scanner.config import settings
from receipt_scanner.services.parser import split_lines

logger = logging.getLogger(__name__)


class OCRService:
    """Service for extracting text lines from receipt images."""

    def __init__(self):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    def extract_text_from_image(self, image_data: bytes) -> Optional[str]:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Extracted text, or None if the image could not be read or recognized
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image = self._preprocess_image(image)

            # Run OCR with custom config for receipts
            custom_config = r'--oem 3 --psm 6'
            text = pytesseract.image_to_string(
                image, lang=settings.OCR_LANGUAGE, config=custom_config
            )

            return text.strip()

        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError):
            logger.warning("Tesseract failed on receipt image", exc_info=True)
            return None
        except (UnidentifiedImageError, OSError):
            logger.warning("Could not decode receipt image", exc_info=True)
            return None

    def extract_lines(self, image_data: bytes) -> Optional[List[str]]:
        """
        Extract non-blank text lines, top to bottom.

        Returns:
            Lines, or None when OCR failed (an empty list means nothing was read)
        """
        text = self.extract_text_from_image(image_data)
        if text is None:
            return None

        lines = split_lines(text)
        logger.debug("OCR produced %d lines", len(lines))
        return lines

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Args:
            image: PIL Image object

        Returns:
            Preprocessed image
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        # Faded thermal paper needs the extra contrast
        enhancer = ImageEnhance.Contrast(image)
        return enhancer.enhance(2.0)
