"""Read-through, TTL-bound cache of canonical candidates.

One cache entry per (category, sorted normalized factions). A request for
several categories is served from the per-category entries, so overlapping
requests share snapshots. Entries are tuples replaced wholesale on refill.

Concurrent misses for one key share a single in-flight fetch. A refill that
times out or fails falls back to the stale snapshot if there is one, else to
an empty candidate set for that category.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from termlens.db import entity_store
from termlens.infra import config
from termlens.models.terms import CandidateEntity, Category
from termlens.utils.normalizer import normalize

logger = logging.getLogger(__name__)

Fetcher = Callable[[list[Category], list[str]], Awaitable[list[CandidateEntity]]]
CacheKey = tuple[Category, tuple[str, ...]]


@dataclass(frozen=True)
class _Snapshot:
    candidates: tuple[CandidateEntity, ...]
    expires_at: float


class CandidateIndex:
    def __init__(
        self,
        fetcher: Fetcher | None = None,
        ttl_seconds: float | None = None,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher if fetcher is not None else entity_store.load_candidates
        self._ttl = ttl_seconds if ttl_seconds is not None else config.CANDIDATE_CACHE_TTL_SECONDS
        self._timeout = (
            timeout_seconds if timeout_seconds is not None
            else config.CANDIDATE_FETCH_TIMEOUT_SECONDS
        )
        self._clock = clock
        self._snapshots: dict[CacheKey, _Snapshot] = {}
        self._inflight: dict[CacheKey, asyncio.Task] = {}
        self._generation = 0

    async def load_candidates(
        self,
        categories: list[Category],
        factions: list[str] | None = None,
    ) -> list[CandidateEntity]:
        """Candidates for every requested category, in category order."""
        faction_key = tuple(sorted({normalize(f) for f in factions or [] if normalize(f)}))
        ordered = list(dict.fromkeys(categories))
        snapshots = await asyncio.gather(
            *(self._get((category, faction_key)) for category in ordered)
        )
        result: list[CandidateEntity] = []
        for snapshot in snapshots:
            result.extend(snapshot)
        return result

    def invalidate(self) -> None:
        """Drop every snapshot; the next read refetches.

        Fetches already in flight still answer their current waiters but are
        neither reused nor cached.
        """
        self._generation += 1
        self._snapshots = {}
        self._inflight = {}

    async def _get(self, key: CacheKey) -> tuple[CandidateEntity, ...]:
        snapshot = self._snapshots.get(key)
        if snapshot is not None and snapshot.expires_at > self._clock():
            return snapshot.candidates

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refill(key, self._generation))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        # shield: one caller being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _refill(self, key: CacheKey, generation: int) -> tuple[CandidateEntity, ...]:
        category, factions = key
        try:
            fetched = await asyncio.wait_for(
                self._fetcher([category], list(factions)), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Candidate fetch for %s %s timed out after %.1fs",
                category.value, factions, self._timeout,
            )
            return self._fallback(key)
        except Exception:
            logger.warning(
                "Candidate fetch for %s %s failed", category.value, factions,
                exc_info=True,
            )
            return self._fallback(key)

        candidates = tuple(fetched)
        if generation != self._generation:
            logger.debug("Discarding candidates for %s %s fetched before invalidation",
                         category.value, factions)
            return candidates
        self._snapshots[key] = _Snapshot(candidates, self._clock() + self._ttl)
        logger.debug(
            "Refilled candidates for %s %s: %d entities",
            category.value, factions, len(candidates),
        )
        return candidates

    def _fallback(self, key: CacheKey) -> tuple[CandidateEntity, ...]:
        stale = self._snapshots.get(key)
        return stale.candidates if stale is not None else ()
