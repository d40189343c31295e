from __future__ import annotations

from typing import Protocol

from app.schemas.ats import CompoundTerm


class VariationProvider(Protocol):
    def get_all_variations(self, keyword: str) -> frozenset[str]:
        """Return the keyword, its synonyms and its known misspellings."""

    def is_misspelling(self, keyword: str, variation: str) -> bool:
        """Return whether variation is a registered misspelling of keyword."""

    def is_compound_term(self, term: str) -> CompoundTerm | None:
        """Return the compound definition for term, if any."""

    def get_industry_variations(self, term: str, industry: str) -> frozenset[str]:
        """Return industry-specific aliases of term in both directions."""

    def available_industries(self) -> list[str]:
        """Return industries that carry industry-specific term maps."""
