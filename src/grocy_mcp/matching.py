"""
Product name matching with confidence scores.

Scores are on a 0-100 scale:
- 100: exact, case-insensitive match
- 80: one name contains the other
- 0-60: share of query words found in (or containing) a product word

Equal scores are ordered by RapidFuzz token_sort_ratio, so "Milk Whole"
still ranks "Whole Milk" ahead of "Milk Chocolate".
"""

import math
from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz

EXACT_SCORE = 100
CONTAINS_SCORE = 80
FUZZY_MAX_SCORE = 60


@dataclass(frozen=True)
class ProductMatch:
    """A scored product candidate."""

    product: dict[str, Any]
    score: int
    match_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.product.get("id"),
            "name": self.product.get("name"),
            "match_score": self.score,
            "match_type": self.match_type,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_name(query: str, name: str, fuzzy: bool = True) -> tuple[int, str]:
    """
    Score a product name against a query.

    Args:
        query: The string to search for
        name: Product name to score
        fuzzy: Whether word-overlap scoring is enabled

    Returns:
        (score, match_type) where match_type is "exact", "contains",
        "fuzzy" or "none"

    Example:
        >>> score_name("milk", "Whole Milk")
        (80, 'contains')
    """
    query_lower = query.lower()
    name_lower = name.lower()

    # Unnamed products never match
    if not name_lower.strip():
        return 0, "none"

    if name_lower == query_lower:
        return EXACT_SCORE, "exact"

    if query_lower in name_lower or name_lower in query_lower:
        return CONTAINS_SCORE, "contains"

    if not fuzzy:
        return 0, "none"

    query_words = query_lower.split()
    name_words = name_lower.split()
    matching = [
        qw for qw in query_words
        if any(nw in qw or qw in nw for nw in name_words)
    ]
    score = _round_half_up(len(matching) / max(len(query_words), 1) * FUZZY_MAX_SCORE)
    return score, ("fuzzy" if score > 0 else "none")


def match_products(
    query: str,
    products: list[dict[str, Any]],
    fuzzy: bool = True,
    limit: int = 5,
) -> list[ProductMatch]:
    """
    Rank Grocy products by how well their name matches a query.

    Zero-score products are dropped; the rest are sorted by score
    (descending) and truncated to ``limit``.

    Args:
        query: Product name to search for
        products: Grocy product objects
        fuzzy: Enable word-overlap scoring
        limit: Maximum number of results to return

    Returns:
        Ranked list of ProductMatch
    """
    scored: list[tuple[ProductMatch, float]] = []
    for product in products:
        name = product.get("name") or ""
        score, match_type = score_name(query, name, fuzzy)
        if score <= 0:
            continue
        similarity = fuzz.token_sort_ratio(query.lower(), name.lower())
        scored.append((ProductMatch(product, score, match_type), similarity))

    # sorted() is stable, so catalog order breaks remaining ties
    scored.sort(key=lambda item: (item[0].score, item[1]), reverse=True)
    return [match for match, _ in scored[: max(limit, 0)]]
