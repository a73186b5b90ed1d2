"""Favorites domain components split by responsibility.

Persistence owns the ownership-scoped SQL statements while enrichment turns a
stored row plus a metadata lookup into the API read model.
"""

from .enrichment import FavoritesEnricher
from .persistence import FavoritesPersistence

__all__ = [
    "FavoritesEnricher",
    "FavoritesPersistence",
]
