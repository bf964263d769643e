from coin_collect.db.repo.local_cache_repo import LocalCacheRepo

__all__ = ["LocalCacheRepo"]
