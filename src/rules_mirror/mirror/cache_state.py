from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from rules_mirror.mirror.errors import FetchError

logger = logging.getLogger(__name__)


class RepositoryFetcher(Protocol):
    @property
    def mirror_path(self) -> Path:
        ...

    def mirror_exists(self) -> bool:
        ...

    async def clone(self) -> None:
        ...

    async def update(self) -> None:
        ...

    async def checkout(self, ref: str) -> None:
        ...


@dataclass(slots=True)
class _InflightFetch:
    done: asyncio.Event = field(default_factory=asyncio.Event)
    error: Optional[BaseException] = None


class CacheState:
    """
    Freshness bookkeeping for the local mirror, plus the single-fetch guard.

    All callers run on one event loop. The check of the in-flight marker and the
    creation of a new one happen without an intervening await, so at most one fetch
    is ever running. Callers arriving during a fetch wait for it and share its outcome.
    """

    def __init__(
        self,
        *,
        fetcher: RepositoryFetcher,
        ttl_seconds: float,
        ref: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._ttl_seconds = ttl_seconds
        self._ref = ref
        self._clock = clock
        self._last_fetch_at: Optional[float] = None
        self._inflight: Optional[_InflightFetch] = None

    @property
    def repository_path(self) -> Path:
        return self._fetcher.mirror_path

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def last_fetch_at(self) -> Optional[float]:
        return self._last_fetch_at

    @property
    def fetch_in_progress(self) -> bool:
        return self._inflight is not None

    def age_seconds(self) -> Optional[float]:
        if self._last_fetch_at is None:
            return None
        return self._clock() - self._last_fetch_at

    def is_fresh(self) -> bool:
        age = self.age_seconds()
        return age is not None and age < self._ttl_seconds

    async def ensure_fresh(self, *, force_refresh: bool = False) -> bool:
        """
        Make sure the mirror exists and is within TTL.

        Returns True when this call performed the fetch, False on a cache hit or
        when another caller's fetch was shared. Fetch errors propagate to the
        caller that ran the fetch and to every caller that waited on it.
        """
        mirror_exists = self._fetcher.mirror_exists()
        if mirror_exists and not force_refresh and self.is_fresh():
            logger.debug("Using cached rules. age_seconds=%.1f", self.age_seconds())
            return False

        inflight = self._inflight
        if inflight is not None:
            logger.info("Fetch already in progress, waiting for it to finish.")
            await inflight.done.wait()
            if inflight.error is not None:
                raise inflight.error
            return False

        inflight = _InflightFetch()
        self._inflight = inflight
        try:
            await self._fetch(mirror_exists=mirror_exists)
        except asyncio.CancelledError:
            inflight.error = FetchError("fetch", "the fetch was cancelled before it completed")
            raise
        except Exception as e:
            inflight.error = e
            raise
        finally:
            self._inflight = None
            inflight.done.set()
        return True

    async def _fetch(self, *, mirror_exists: bool) -> None:
        if mirror_exists:
            await self._fetcher.update()
        else:
            await self._fetcher.clone()
        if self._ref:
            await self._fetcher.checkout(self._ref)
        self._last_fetch_at = self._clock()
        logger.info("Rules repository updated successfully. path=%s", self._fetcher.mirror_path)
