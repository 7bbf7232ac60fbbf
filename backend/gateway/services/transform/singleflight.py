"""Coalescing of concurrent calls that share a key."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """
    Runs at most one call per key at a time.

    Callers arriving while a call for the same key is in flight await
    its result (or its exception) instead of starting their own.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Future[T]] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        existing = self._in_flight.get(key)
        if existing is not None:
            logger.debug(f"Joining in-flight call for {key}")
            try:
                return await asyncio.shield(existing)
            except asyncio.CancelledError:
                # Only the leader was cancelled; this caller still wants a result
                if not existing.cancelled() or asyncio.current_task().cancelling():
                    raise
                logger.debug(f"Leader for {key} was cancelled, retrying")
                return await self.do(key, fn)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await fn()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unjoined failure is not reported as unhandled
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._in_flight[key]

    def __len__(self) -> int:
        return len(self._in_flight)
