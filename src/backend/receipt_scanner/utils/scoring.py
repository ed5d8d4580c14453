"""
Selection functions for extraction candidates.

Candidates arrive in discovery order (line order, then pattern order) and
carry the confidence assigned by their pattern table. These helpers pick
the winner for a field and rank alternatives for review.
"""

from typing import Dict, List, Optional, TypeVar

from .candidates import Candidate, FieldExtraction

__all__ = [
    'select_first_candidate', 'select_best_candidate', 'select_top_candidates',
    'dedupe_by_value', 'to_extraction',
]

T = TypeVar('T', bound=Candidate)


def select_first_candidate(candidates: List[T]) -> Optional[T]:
    """
    Select the earliest discovered candidate.

    Used where the pattern table order already encodes priority
    (merchant, date).
    """
    if not candidates:
        return None
    return min(candidates, key=lambda c: c.order)


def select_best_candidate(candidates: List[T]) -> Optional[T]:
    """
    Select the highest-confidence candidate, earliest discovered on ties.

    A left fold in discovery order where only a strictly higher
    confidence replaces the current best.

    Example:
        >>> best = select_best_candidate(amount_candidates)
    """
    best: Optional[T] = None
    for candidate in sorted(candidates, key=lambda c: c.order):
        if best is None or candidate.confidence > best.confidence:
            best = candidate
    return best


def dedupe_by_value(candidates: List[T]) -> List[T]:
    """
    Collapse candidates sharing a value, keeping the highest-confidence one.

    The kept candidate retains its own discovery order, so the outcome of
    select_best_candidate is unchanged by deduplication.
    """
    kept: Dict[object, T] = {}
    for candidate in sorted(candidates, key=lambda c: c.order):
        current = kept.get(candidate.value)
        if current is None or candidate.confidence > current.confidence:
            kept[candidate.value] = candidate
    return sorted(kept.values(), key=lambda c: c.order)


def select_top_candidates(
    candidates: List[T],
    top_n: int = 3,
    selected: Optional[T] = None
) -> List[T]:
    """
    Select top N distinct values by confidence, discovery order breaking ties.

    Args:
        candidates: List of candidates to rank
        top_n: Number of top candidates to return (default 3)
        selected: The candidate chosen for the field; listed first if given

    Returns:
        Candidates sorted by confidence descending
    """
    if not candidates or top_n <= 0:
        return []

    ranked = sorted(dedupe_by_value(candidates), key=lambda c: (-c.confidence, c.order))
    if selected is not None:
        ranked = [selected] + [c for c in ranked if c.value != selected.value]
    return ranked[:top_n]


def to_extraction(candidate: Optional[Candidate]) -> FieldExtraction:
    """Wrap a selected candidate (or None) as a FieldExtraction."""
    if candidate is None:
        return FieldExtraction.not_found()
    return FieldExtraction(
        value=candidate.value,
        confidence=candidate.confidence,
        pattern_name=candidate.pattern_name
    )
