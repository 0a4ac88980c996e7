from __future__ import annotations

import re
from typing import Iterable

# (query words, category words, whole-word match on the category side)
# A rule fires when the query contains one of its query words and the
# category contains one of its category words.
SYNONYM_RULES: list[tuple[tuple[str, ...], tuple[str, ...], bool]] = [
    # Food / restaurant
    (("food", "eat", "hungry", "meal", "dining", "restaurant"), ("restaurant",), False),
    (("restaurant", "cafe", "diner"), ("food",), False),
    # Shopping
    (("shop", "shopping", "buy", "store"), ("fashion", "electronics", "retail"), True),
    # Services
    (("haircut", "hair", "barber"), ("beauty",), False),
    (("fix", "repair", "service"), ("services",), False),
    # Health
    (("doctor", "medical", "health", "pharmacy"), ("health",), False),
]


def _words_re(words: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(r"\b(" + "|".join(map(re.escape, words)) + r")\b")


_COMPILED_RULES = [
    (
        _words_re(query_words),
        _words_re(category_words) if whole_word else None,
        category_words,
    )
    for query_words, category_words, whole_word in SYNONYM_RULES
]


def _synonym_match(query: str, category: str) -> bool:
    for query_re, category_re, category_words in _COMPILED_RULES:
        if not query_re.search(query):
            continue
        if category_re is not None:
            if category_re.search(category):
                return True
        elif any(word in category for word in category_words):
            return True
    return False


def matches(query: str, categories: Iterable[str]) -> bool:
    """
    Decide whether a free-text query is about any of a shop's categories.

    Substring containment in either direction, or one of the small domain
    synonym rules above. Misses are expected for domains with no rule.
    """
    query_lower = query.lower()
    for category in categories:
        category_lower = category.lower()
        if category_lower in query_lower or query_lower in category_lower:
            return True
        if _synonym_match(query_lower, category_lower):
            return True
    return False
