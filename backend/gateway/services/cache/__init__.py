"""Edge and durable cache tiers."""

from gateway.services.cache.durable import ObjectStore, RedisObjectStore
from gateway.services.cache.edge import CachedResponse, EdgeCache

__all__ = ["CachedResponse", "EdgeCache", "ObjectStore", "RedisObjectStore"]
