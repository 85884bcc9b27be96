"""
Review Service — Application layer orchestrator.

Coordinates reading a record from the store, scheduling it with the engine,
writing it back, and forwarding it to the remote backend.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from kioku.domain.mastery.models import (
    DifficultyRating,
    ItemId,
    MasteryRecord,
    SRSResult,
    WordStatistics,
)
from kioku.domain.mastery.ports import MasteryStore, RemoteSync, SyncError

from .engine import SRSEngine, format_interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of recording one answer."""

    record: MasteryRecord  # Record as persisted locally
    result: SRSResult
    synced: bool  # False when remote delivery was skipped or failed


class ReviewService:
    """
    Application service for recording answers and reading statistics.

    Follows Dependency Inversion: depends on the MasteryStore and RemoteSync
    abstractions, not concrete adapter implementations.
    """

    def __init__(
        self,
        store: MasteryStore,
        sync: RemoteSync | None = None,
        engine: SRSEngine | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            store: The repository (port) holding mastery records.
            sync: Optional remote sync; remote delivery is skipped if not provided.
            engine: Optional custom engine; uses default if not provided.
            clock: Wall-clock source returning epoch seconds.
        """
        self._store = store
        self._sync = sync
        self._engine = engine or SRSEngine()
        self._clock = clock

    def get_record(self, item_id: ItemId) -> MasteryRecord:
        """Fetch the stored record, or a fresh default one for an unseen item."""
        return self._store.get(item_id) or MasteryRecord(item_id=item_id)

    async def record_answer(
        self, item_id: ItemId, difficulty: DifficultyRating
    ) -> ReviewOutcome:
        """
        Schedule an answer, persist it locally, then push it to the backend.

        The local write always happens first; a SyncError is logged and
        reported through `ReviewOutcome.synced` instead of raised.
        """
        difficulty = DifficultyRating(difficulty)
        current = self.get_record(item_id)
        now = int(self._clock())

        result = self._engine.schedule_review(current, difficulty)
        updated = current.with_result(result, reviewed_at=now)
        self._store.put(updated)

        # Log the clamped starting state
        before = self._engine.normalize(current)
        logger.info(
            f"Scheduled item {item_id} ({difficulty.value}): "
            f"level {before.knowledge_level} -> {result.new_knowledge_level}, "
            f"ease {before.ease_factor:.2f} -> {result.new_ease_factor:.2f}, "
            f"next in {format_interval(result.next_interval_seconds)}"
        )

        synced = False
        if self._sync is not None:
            try:
                await self._sync.push(updated, result, now)
                synced = True
                logger.debug(f"Synced item {item_id} to remote backend")
            except SyncError as e:
                logger.warning(f"Failed to sync item {item_id} (saved locally): {e}")

        return ReviewOutcome(record=updated, result=result, synced=synced)

    def get_statistics(self, item_id: ItemId) -> WordStatistics:
        return self._engine.compute_statistics(self.get_record(item_id))

    def due_items(self, now: int | None = None) -> list[MasteryRecord]:
        """
        List reviewed items whose next review time has passed.

        Args:
            now: Epoch seconds to compare against; defaults to the service clock.

        Returns:
            Due records, earliest due first.
        """
        cutoff = int(self._clock()) if now is None else now
        due = [
            r
            for r in self._store.all()
            if r.next_review_at is not None and r.next_review_at <= cutoff
        ]
        return sorted(due, key=lambda r: r.next_review_at)
