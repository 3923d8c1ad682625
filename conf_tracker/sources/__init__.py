"""Catalog sources and the in-process catalog cache."""

from conf_tracker.sources.cache import CatalogCache
from conf_tracker.sources.store import CatalogStore, FileStore, SupabaseStore

__all__ = ["CatalogCache", "CatalogStore", "FileStore", "SupabaseStore"]
