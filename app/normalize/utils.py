from __future__ import annotations

import re
from functools import lru_cache

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"(\+?1[-.\s]?)?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}")
_TOKEN_SPLIT_RE = re.compile(r"\W+")
_CLEAN_KEYWORD_RE = re.compile(r"[^\w\s+.\-]")


def escape_literal(term: str) -> str:
    """Escape a term so every character matches literally."""
    return re.escape(term)


@lru_cache(maxsize=4096)
def word_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive pattern matching term as a whole word.

    Lookarounds are used instead of ``\\b`` so terms that start or end with
    punctuation (``c++``, ``.net``, ``ci/cd``) still match next to spaces.
    """
    return re.compile(rf"(?<!\w){escape_literal(term.strip().lower())}(?!\w)", re.IGNORECASE)


def count_word_matches(term: str, text: str) -> int:
    if not term.strip() or not text:
        return 0
    return sum(1 for _ in word_pattern(term).finditer(text))


def first_word_match(term: str, text: str) -> int:
    """Offset of the first whole-word occurrence of term in text, or -1."""
    if not term.strip() or not text:
        return -1
    match = word_pattern(term).search(text)
    return match.start() if match else -1


def contains_word(term: str, text: str) -> bool:
    return first_word_match(term, text) >= 0


def word_offsets(term: str, text: str) -> list[int]:
    """Offsets of every whole-word occurrence of term in text."""
    if not term.strip() or not text:
        return []
    return [match.start() for match in word_pattern(term).finditer(text)]


def tokenize_words(text: str) -> list[str]:
    return [token for token in _TOKEN_SPLIT_RE.split(text) if token]


def clean_keyword(raw: str) -> str:
    cleaned = _CLEAN_KEYWORD_RE.sub("", raw.strip().lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()
