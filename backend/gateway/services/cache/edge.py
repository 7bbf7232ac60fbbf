"""In-process edge cache for complete image responses.

Entries are keyed by the full caller-facing request URL. Each entry lives
for the ``max-age`` of the ``cache-control`` header it was stored with.
The map is bounded and evicts least recently used entries first.
"""

import asyncio
import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass, field

from fastapi import Response

logger = logging.getLogger(__name__)

_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


def parse_max_age(cache_control: str | None) -> int:
    """Extract max-age seconds from a cache-control value (0 if absent)."""
    if not cache_control or "no-store" in cache_control:
        return 0
    match = _MAX_AGE_PATTERN.search(cache_control)
    return int(match.group(1)) if match else 0


@dataclass
class CachedResponse:
    """A stored response, replayed verbatim on a hit."""

    status_code: int
    headers: dict[str, str]
    body: bytes
    max_age: int
    stored_at: float = field(default_factory=time.monotonic)

    @property
    def expired(self) -> bool:
        return time.monotonic() - self.stored_at >= self.max_age

    @classmethod
    def from_response(cls, response: Response) -> "CachedResponse":
        """Snapshot a fully-buffered response."""
        headers = dict(response.headers)
        return cls(
            status_code=response.status_code,
            headers=headers,
            body=bytes(response.body),
            max_age=parse_max_age(headers.get("cache-control")),
        )

    def to_response(self) -> Response:
        return Response(
            content=self.body,
            status_code=self.status_code,
            headers=self.headers,
        )


class EdgeCache:
    """
    Bounded LRU response cache local to this process.

    Features:
    - TTL from the stored cache-control header
    - LRU eviction when full
    - Safe for concurrent requests on one event loop
    """

    def __init__(self, max_entries: int = 1024, enabled: bool = True):
        self._max_entries = max(1, max_entries)
        self._enabled = enabled
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()
        self._lock = asyncio.Lock()

    async def match(self, key: str) -> Response | None:
        """Return the cached response for key, if present and fresh."""
        if not self._enabled:
            return None

        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.expired:
                del self._entries[key]
                logger.debug(f"Edge entry expired: {key}")
                return None

            self._entries.move_to_end(key)
            return entry.to_response()

    async def put(self, key: str, response: Response) -> None:
        """Store a response. Responses without a positive max-age are skipped."""
        if not self._enabled:
            return

        entry = CachedResponse.from_response(response)
        if entry.max_age <= 0:
            return

        async with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)

            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Edge LRU evicted: {evicted}")

    def __len__(self) -> int:
        return len(self._entries)
