"""Fuzzy relevance ranking for the storefront menu.

Scoring works on the lowercased dish name only. Whole-string matches win
outright; otherwise every query word is compared against every dish word and
the per-pair points are summed, with a bonus when several query words hit.
Typos are tolerated through a small Levenshtein threshold that depends on the
query word length.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from .models import CatalogItem, ScoredItem

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"

EXACT_MATCH_SCORE = 1000
SUBSTRING_MATCH_SCORE = 900
WORD_EXACT_SCORE = 500
WORD_PREFIX_SCORE = 300
WORD_CONTAINS_SCORE = 200
WORD_FUZZY_SCORE = 100
WORD_POSITION_PENALTY = 10
FUZZY_POSITION_PENALTY = 5
FUZZY_DISTANCE_PENALTY = 20
MULTI_WORD_BONUS = 150
MIN_QUERY_WORD_LENGTH = 2
SHORT_WORD_LENGTH = 4


def levenshtein(source: str, target: str) -> int:
    """Edit distance with unit cost insertions, deletions and substitutions."""
    rows = len(source) + 1
    cols = len(target) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if source[i - 1] == target[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )
    return table[-1][-1]


def max_distance(query_word: str) -> int:
    return 1 if len(query_word) <= SHORT_WORD_LENGTH else 2


def _pair_score(item_word: str, query_word: str, index: int) -> int:
    if item_word == query_word:
        return WORD_EXACT_SCORE - WORD_POSITION_PENALTY * index
    if item_word.startswith(query_word):
        return WORD_PREFIX_SCORE - WORD_POSITION_PENALTY * index
    if query_word in item_word:
        return WORD_CONTAINS_SCORE - WORD_POSITION_PENALTY * index

    distance = levenshtein(item_word, query_word)
    if distance <= max_distance(query_word):
        return WORD_FUZZY_SCORE - FUZZY_DISTANCE_PENALTY * distance - FUZZY_POSITION_PENALTY * index
    return 0


def _word_matches(item_word: str, query_word: str) -> bool:
    if item_word == query_word or query_word in item_word:
        return True
    return levenshtein(item_word, query_word) <= max_distance(query_word)


def score(item_name: str, query: str) -> int:
    """Return the relevance of ``item_name`` for ``query``.

    An empty query scores 0; callers treat that as "no text filter" rather
    than "no match".
    """
    if not query:
        return 0

    name = item_name.lower()
    needle = query.lower()
    if name == needle:
        return EXACT_MATCH_SCORE
    if needle in name:
        return SUBSTRING_MATCH_SCORE

    item_words = name.split()
    query_words = needle.split()

    total = 0
    for query_word in query_words:
        if len(query_word) < MIN_QUERY_WORD_LENGTH:
            continue
        for index, item_word in enumerate(item_words):
            total += _pair_score(item_word, query_word, index)

    matching_words = sum(
        1
        for query_word in dict.fromkeys(query_words)
        if any(_word_matches(item_word, query_word) for item_word in item_words)
    )
    if matching_words > 1:
        total += MULTI_WORD_BONUS * matching_words

    # Position penalties can push far-away fuzzy hits below zero.
    return max(total, 0)


def in_category(item: CatalogItem, category: str) -> bool:
    return category == ALL_CATEGORIES or category in item.categories


def rank(catalog: Iterable[CatalogItem], query: str = "", category: str = ALL_CATEGORIES) -> List[ScoredItem]:
    """Filter ``catalog`` by category and query, most relevant first.

    With a blank query the category-filtered items come back in catalog order
    with a score of 0. With a query, zero-scored items are dropped and the
    rest are stable-sorted by score.
    """
    text = (query or "").strip()
    ranked: List[ScoredItem] = []
    for item in catalog:
        if not in_category(item, category):
            continue
        relevance = score(item.name, text) if text else 0
        if text and relevance <= 0:
            continue
        ranked.append(ScoredItem.model_validate({**item.model_dump(), "relevanceScore": relevance}))

    if text:
        ranked.sort(key=lambda scored: scored.relevanceScore, reverse=True)
    logger.debug("rank q=%r category=%r kept=%s", text, category, len(ranked))
    return ranked
