"""Cache providers.

ArtistWeightCache memoises the first weight observed for each artist so
that every genre row reports a consistent value for that artist.  It is
constructed per pipeline run and injected; there is no process-wide cache.
"""

from genremap.providers.cache.artist_weight_cache import ArtistWeightCache

__all__ = ["ArtistWeightCache"]
