from coin_collect.db.models.base import Base
from coin_collect.db.models.local_cache_entries import LocalCacheEntry

__all__ = ["Base", "LocalCacheEntry"]
