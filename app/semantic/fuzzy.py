from __future__ import annotations

from collections import Counter

from app.core.config.scoring import get_scoring_value
from app.normalize.utils import tokenize_words


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance over a full (len(a)+1) x (len(b)+1) matrix."""
    rows = len(a) + 1
    cols = len(b) + 1
    matrix = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if a[i - 1] == b[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j - 1] + 1,
                    matrix[i][j - 1] + 1,
                    matrix[i - 1][j] + 1,
                )
    return matrix[rows - 1][cols - 1]


def allowed_distance(keyword: str) -> int:
    short_length = int(get_scoring_value("matching.fuzzy.short_keyword_length", 5))
    if len(keyword) <= short_length:
        return int(get_scoring_value("matching.fuzzy.short_distance", 1))
    return int(get_scoring_value("matching.fuzzy.long_distance", 2))


def fuzzy_tokens(keyword: str, text: str) -> Counter[str]:
    """Count tokens of text that are near-misses of keyword.

    A token qualifies when its length is within the configured tolerance of the
    keyword's length and its edit distance is within ``allowed_distance``.
    """
    needle = keyword.strip().lower()
    tolerance = int(get_scoring_value("matching.fuzzy.length_tolerance", 2))
    max_distance = allowed_distance(needle)

    hits: Counter[str] = Counter()
    for token in tokenize_words(text.lower()):
        if abs(len(token) - len(needle)) > tolerance:
            continue
        if levenshtein_distance(token, needle) <= max_distance:
            hits[token] += 1
    return hits
