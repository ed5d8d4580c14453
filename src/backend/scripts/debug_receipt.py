"""
Debug script to see what the parser extracts from a receipt.

Usage:
    python scripts/debug_receipt.py receipt.txt
    python scripts/debug_receipt.py receipt.jpg --image
    python scripts/debug_receipt.py receipt.txt --json
"""

import argparse
import json
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from receipt_scanner.services.parser import ReceiptParser, split_lines
from receipt_scanner.utils.money import format_money


def main():
    arg_parser = argparse.ArgumentParser(description="Parse one receipt and print the extracted fields")
    arg_parser.add_argument("path", help="Text file with one OCR line per line, or an image with --image")
    arg_parser.add_argument("--image", action="store_true", help="Run OCR on the file first")
    arg_parser.add_argument("--json", action="store_true", help="Print the receipt as JSON")
    args = arg_parser.parse_args()

    path = Path(args.path)
    if args.image:
        from receipt_scanner.services.ocr import OCRService

        lines = OCRService().extract_lines(path.read_bytes())
        if lines is None:
            print("OCR failed", file=sys.stderr)
            return 1
    else:
        lines = split_lines(path.read_text(encoding="utf-8"))

    parser = ReceiptParser()
    receipt = parser.parse(lines)

    if args.json:
        print(json.dumps(receipt.model_dump(mode="json"), indent=2))
        return 0

    print("=" * 60)
    print(f"Receipt: {path.name} ({len(lines)} lines)")
    print("=" * 60)
    print(f"Merchant:   {receipt.merchant or 'N/A'} ({receipt.confidence.merchant:.2f})")
    print(f"Amount:     {format_money(receipt.amount)} ({receipt.confidence.amount:.2f})")
    print(f"Date:       {receipt.date:%Y-%m-%d} ({receipt.confidence.date:.2f})")
    print(f"Category:   {receipt.category or 'N/A'}")
    print(f"Overall:    {receipt.confidence.overall:.2f}"
          f"{'' if receipt.is_high_confidence else '  (please verify)'}")

    print("\nCandidates:")
    print("-" * 60)
    for field_name, options in parser.review_candidates(lines).items():
        print(f"  {field_name}:")
        for option in options:
            print(f"    {option['value']!s:<30} {option['confidence']:.2f}  "
                  f"{option['pattern']} (line {option['line']}: {option['text']!r})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
