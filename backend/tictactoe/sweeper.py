"""
Уборка партий по таймеру: старые партии удаляются периодически,
брошенные (соперник отключился) — после паузы.
"""
import asyncio
import logging
import time
from typing import Callable

from .game import Match
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class LifecycleSweeper:
    def __init__(
        self,
        registry: SessionRegistry,
        max_age: float,
        interval: float,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry
        self.max_age = max_age
        self.interval = interval
        self.clock = clock
        self._evictions: dict[str, asyncio.Task] = {}
        self._loop_task: asyncio.Task | None = None

    @property
    def pending(self) -> set[str]:
        return set(self._evictions)

    def sweep(self, now: float | None = None) -> list[str]:
        """Удалить партии старше max_age в любой фазе. Возвращает их id."""
        now = self.clock() if now is None else now
        expired = [m.id for m in self.registry.matches() if now - m.created_at > self.max_age]
        for match_id in expired:
            self.cancel_eviction(match_id)
            self.registry.delete_match(match_id)
        if expired:
            logger.info("sweeper: evicted %d stale match(es): %s", len(expired), ", ".join(expired))
        return expired

    def schedule_eviction(self, match_id: str, delay: float) -> None:
        """Отложенное удаление. Повторный вызов для того же id заменяет таймер."""
        match = self.registry.find_match(match_id)
        if match is None:
            return
        self.cancel_eviction(match_id)
        self._evictions[match_id] = asyncio.create_task(self._evict_later(match_id, match, delay))
        logger.info("match %s scheduled for eviction in %.1fs", match_id, delay)

    def cancel_eviction(self, match_id: str) -> bool:
        task = self._evictions.pop(match_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    async def _evict_later(self, match_id: str, match: Match, delay: float) -> None:
        await asyncio.sleep(delay)
        self._evictions.pop(match_id, None)
        # id мог быть переиспользован новой партией
        if self.registry.find_match(match_id) is match:
            self.registry.delete_match(match_id)
            logger.info("match %s evicted after disconnect", match_id)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep()
            except Exception as e:
                logger.exception("sweeper: error: %s", e)

    def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._run())
            logger.info("sweeper started: interval=%ss max_age=%ss", self.interval, self.max_age)

    async def stop(self) -> None:
        tasks = list(self._evictions.values())
        self._evictions.clear()
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("sweeper stopped")
