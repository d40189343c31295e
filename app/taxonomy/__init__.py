from functools import lru_cache

from .local_taxonomy import LocalVariationDatabase
from .provider import VariationProvider


@lru_cache(maxsize=1)
def get_default_variation_database() -> VariationProvider:
    return LocalVariationDatabase()


__all__ = ["VariationProvider", "LocalVariationDatabase", "get_default_variation_database"]
