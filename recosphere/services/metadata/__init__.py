"""TMDb metadata lookups shared by the favorites workflow.

* :class:`MetadataCache` – TTL store for detail payloads keyed by media type and id.
* :class:`GenreCache` – genre id to name maps loaded once at startup.
* :class:`MetadataFetcher` – cache-or-fetch returning :data:`MetadataResult`.
"""

from .cache import MetadataCache
from .fetcher import MetadataFetcher, MetadataHit, MetadataMiss, MetadataResult
from .genres import GenreCache

__all__ = [
    "GenreCache",
    "MetadataCache",
    "MetadataFetcher",
    "MetadataHit",
    "MetadataMiss",
    "MetadataResult",
]
