from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.cache_models import CacheEntry


__all__: list[str] = ["InFlightManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class InFlightManager:
    """Coalesces concurrent cache misses for the same fingerprint.

    The first request for a fingerprint becomes the leader and runs the provider race; later
    requests receive the leader's future and wait for its outcome instead of racing again.
    All methods except `wait` are synchronous and must run on the event loop thread.

    Args:
        wait_timeout_sec (float): How long a follower waits for the leader.

    Attributes:
        LOG_KEY_LENGTH (ClassVar[int]): Number of fingerprint characters shown in logs.
    """

    LOG_KEY_LENGTH: ClassVar[int] = 16

    def __init__(self, wait_timeout_sec: float = 15.0) -> None:
        self.wait_timeout_sec: float = wait_timeout_sec
        self._inflight: dict[str, asyncio.Future[CacheEntry]] = {}

    def __len__(self) -> int:
        return len(self._inflight)

    def claim(self, cache_key: str) -> asyncio.Future[CacheEntry] | None:
        """Register interest in a fingerprint.

        Returns:
            asyncio.Future[CacheEntry] | None: None when the caller is now the leader and must
            call `resolve` or `fail`; otherwise the leader's future to pass to `wait`.
        """
        fut: asyncio.Future[CacheEntry] | None = self._inflight.get(cache_key)
        if fut is not None and not fut.done():
            logger.debug("In-flight translation detected for key: %s", cache_key[: self.LOG_KEY_LENGTH])
            return fut

        self._inflight[cache_key] = asyncio.get_running_loop().create_future()
        logger.debug("Marked in-flight start for key: %s", cache_key[: self.LOG_KEY_LENGTH])
        return None

    async def wait(self, cache_key: str, fut: asyncio.Future[CacheEntry]) -> CacheEntry:
        """Wait for the leader's outcome.

        Raises:
            TimeoutError: If the leader does not finish in time or its future is cancelled.
            Exception: Whatever the leader stored with `fail`.
        """
        try:
            # shield: a follower timing out must not cancel the leader's future.
            return await asyncio.wait_for(asyncio.shield(fut), timeout=self.wait_timeout_sec)
        except TimeoutError:
            logger.warning("In-flight translation timeout for key: %s", cache_key[: self.LOG_KEY_LENGTH])
            msg: str = f"In-flight translation timed out for key: {cache_key[: self.LOG_KEY_LENGTH]}"
            raise TimeoutError(msg) from None
        except asyncio.CancelledError:
            if not fut.cancelled():
                raise
            msg = f"In-flight translation cancelled for key: {cache_key[: self.LOG_KEY_LENGTH]}"
            raise TimeoutError(msg) from None

    def resolve(self, cache_key: str, entry: CacheEntry) -> None:
        """Hand the leader's cache entry to every follower."""
        fut: asyncio.Future[CacheEntry] | None = self._inflight.pop(cache_key, None)
        if fut is not None and not fut.done():
            fut.set_result(entry)
            logger.debug("Set in-flight result for key: %s", cache_key[: self.LOG_KEY_LENGTH])

    def fail(self, cache_key: str, exc: BaseException) -> None:
        """Hand the leader's failure to every follower."""
        fut: asyncio.Future[CacheEntry] | None = self._inflight.pop(cache_key, None)
        if fut is None or fut.done():
            return
        if isinstance(exc, asyncio.CancelledError):
            fut.cancel()
        else:
            fut.set_exception(exc)
            # Mark retrieved so an unawaited future does not log "exception was never retrieved".
            fut.exception()
        logger.debug("Set in-flight failure for key: %s", cache_key[: self.LOG_KEY_LENGTH])

    def cancel_all(self) -> None:
        """Cancel every pending future and forget them."""
        for fut in self._inflight.values():
            if not fut.done():
                fut.cancel()
        self._inflight.clear()
        logger.info("InFlightManager in-flight state cleared")
