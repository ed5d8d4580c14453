"""
Category classifier for scanned receipts.

Deterministic keyword lookup on the merchant name only. Groups are checked
in declared order and the first group with a substring hit wins.
"""

import logging
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Ordered (category, keywords) buckets; keywords are lowercase substrings
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Food & Dining", ("starbucks", "mcdonald", "restaurant", "cafe")),
    ("Shopping", ("walmart", "target", "amazon", "store")),
    ("Transportation", ("shell", "chevron", "gas", "fuel")),
    ("Healthcare", ("cvs", "pharmacy", "walgreens", "medical")),
    ("Groceries", ("safeway", "costco", "market", "grocery")),
)

CATEGORIES = tuple(category for category, _ in CATEGORY_KEYWORDS)


class CategoryClassifier:
    """Maps a merchant name to a spending category."""

    def __init__(self, rules: Sequence[Tuple[str, Sequence[str]]] = CATEGORY_KEYWORDS):
        self.rules = tuple((category, tuple(k.lower() for k in keywords)) for category, keywords in rules)

    def classify(self, merchant_name: Optional[str]) -> Optional[str]:
        """
        Return the first category whose keywords occur in the merchant name.

        Args:
            merchant_name: Extracted merchant, may be None

        Returns:
            Category name or None when merchant is missing or nothing matches
        """
        if not merchant_name or not merchant_name.strip():
            return None

        merchant = merchant_name.lower()
        for category, keywords in self.rules:
            for keyword in keywords:
                if keyword in merchant:
                    logger.debug("Category %s from keyword %r", category, keyword)
                    return category

        return None
