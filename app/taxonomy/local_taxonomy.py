from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from app.schemas.ats import CompoundTerm

from .provider import VariationProvider

logger = logging.getLogger(__name__)

_EMPTY: frozenset[str] = frozenset()


def _freeze_groups(raw: Mapping[str, Any]) -> Mapping[str, frozenset[str]]:
    groups: dict[str, frozenset[str]] = {}
    for key, values in raw.items():
        groups[str(key).strip().lower()] = frozenset(str(value).strip().lower() for value in values)
    return MappingProxyType(groups)


def _reverse_index(groups: Mapping[str, frozenset[str]]) -> Mapping[str, frozenset[str]]:
    """Map each alias to the canonical terms that list it."""
    reverse: dict[str, set[str]] = {}
    for canonical, aliases in groups.items():
        for alias in aliases:
            reverse.setdefault(alias, set()).add(canonical)
    return MappingProxyType({alias: frozenset(terms) for alias, terms in reverse.items()})


class LocalVariationDatabase(VariationProvider):
    """Read-only synonym, misspelling, compound and industry tables loaded from JSON."""

    def __init__(self, variations_path: str | Path | None = None) -> None:
        path = Path(variations_path) if variations_path else Path(__file__).with_name("variations.json")
        raw = self._load(path)

        self._synonyms = _freeze_groups(raw.get("synonym_groups", {}))
        self._synonym_owners = _reverse_index(self._synonyms)
        self._misspellings = _freeze_groups(raw.get("misspellings", {}))
        self._compounds: Mapping[str, CompoundTerm] = MappingProxyType(
            {
                str(item["full"]).strip().lower(): CompoundTerm(
                    full=str(item["full"]).strip().lower(),
                    parts=[str(part).strip().lower() for part in item["parts"]],
                    must_match_all=bool(item.get("must_match_all", True)),
                )
                for item in raw.get("compound_terms", [])
            }
        )

        industry_terms: dict[str, Mapping[str, frozenset[str]]] = {}
        industry_owners: dict[str, Mapping[str, frozenset[str]]] = {}
        for industry, terms in raw.get("industry_terms", {}).items():
            name = str(industry).strip().lower()
            industry_terms[name] = _freeze_groups(terms)
            industry_owners[name] = _reverse_index(industry_terms[name])
        self._industry_terms = MappingProxyType(industry_terms)
        self._industry_owners = MappingProxyType(industry_owners)

        logger.info(
            "variation_database_loaded path=%s synonym_groups=%s compounds=%s industries=%s",
            path.name,
            len(self._synonyms),
            len(self._compounds),
            len(self._industry_terms),
        )

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        if not isinstance(raw, dict):
            raise RuntimeError(f"Invalid variation database '{path}': expected a top-level mapping.")
        return raw

    def get_all_variations(self, keyword: str) -> frozenset[str]:
        key = keyword.strip().lower()
        variations = {key}
        variations.update(self._synonyms.get(key, _EMPTY))
        for canonical in self._synonym_owners.get(key, _EMPTY):
            variations.add(canonical)
            variations.update(self._synonyms[canonical])
        variations.update(self._misspellings.get(key, _EMPTY))
        return frozenset(variations)

    def is_misspelling(self, keyword: str, variation: str) -> bool:
        return variation.strip().lower() in self._misspellings.get(keyword.strip().lower(), _EMPTY)

    def is_compound_term(self, term: str) -> CompoundTerm | None:
        return self._compounds.get(term.strip().lower())

    def get_industry_variations(self, term: str, industry: str) -> frozenset[str]:
        terms = self._industry_terms.get(industry.strip().lower())
        if terms is None:
            return _EMPTY
        owners = self._industry_owners[industry.strip().lower()]
        key = term.strip().lower()

        variations: set[str] = set(terms.get(key, _EMPTY))
        for canonical in owners.get(key, _EMPTY):
            variations.add(canonical)
            variations.update(terms[canonical])
        return frozenset(variations)

    def available_industries(self) -> list[str]:
        return list(self._industry_terms.keys())
