from .fuzzy import fuzzy_tokens, levenshtein_distance
from .keyword_matcher import AdvancedKeywordMatcher, contextual_score, match_keywords, select_best_match
from .semantic_match import SemanticHit, find_semantic_phrase

__all__ = [
    "AdvancedKeywordMatcher",
    "match_keywords",
    "contextual_score",
    "select_best_match",
    "levenshtein_distance",
    "fuzzy_tokens",
    "SemanticHit",
    "find_semantic_phrase",
]
