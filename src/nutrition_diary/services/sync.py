"""Optimistic persistence of diary mutations to the backend.

Every mutation is applied to the local ``DiaryAggregator`` first and then
sent to the backend. When the backend answers, its record replaces the
tentative local one (server wins). When a write fails the local value is
kept, the write is queued for ``retry_pending`` and ``PersistenceFailure``
is raised so the caller can tell the user.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Protocol

from nutrition_diary.domain.diary import (
    DiaryEntry,
    DiaryEntryNotFound,
    FoodRef,
    MealSlot,
)
from nutrition_diary.domain.portions import PortionSpec
from nutrition_diary.services.diary import DiaryAggregator
from nutrition_diary.services.library import FoodLibraryService

_logger = logging.getLogger(__name__)


class PersistenceFailure(RuntimeError):
    """Raised when the backend rejects a diary write."""


class DiaryRepository(Protocol):
    """Backend interface for diary entries."""

    async def create_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        """Persist a new entry and return the stored record."""

    async def update_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        """Persist an entry's new portion and return the stored record."""

    async def delete_diary_entry(self, entry_id: str) -> None:
        """Delete an entry."""

    async def list_diary_entries(self, day: date) -> list[DiaryEntry]:
        """Return stored entries for a day."""


class WriteAction(StrEnum):
    """Kind of backend write a diary mutation needs."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingWrite:
    """A backend write waiting to be retried."""

    action: WriteAction
    entry_id: str


@dataclass
class DiarySyncService:
    """Applies diary mutations locally, then persists them."""

    aggregator: DiaryAggregator
    repository: DiaryRepository
    library_service: FoodLibraryService | None = None
    pending: list[PendingWrite] = field(default_factory=list)
    _in_flight: set[str] = field(default_factory=set, init=False, repr=False)

    async def load_day(self, day: date) -> list[DiaryEntry]:
        """Replace local entries for a day with the backend's copy.

        Entries with writes still pending or in flight keep their local
        values, and stored entries with a queued delete stay deleted.
        """
        try:
            entries = await self.repository.list_diary_entries(day)
        except Exception as exc:
            raise PersistenceFailure(f"Failed to load diary for {day}") from exc
        unsynced = {
            entry.id
            for entry in self.aggregator.entries_for(day)
            if not entry.synced or entry.id in self._in_flight
        }
        self.aggregator.load_entries(
            day,
            [
                entry
                for entry in entries
                if not self._has_pending(WriteAction.DELETE, entry.id)
            ],
            keep=unsynced,
        )
        return self.aggregator.entries_for(day)

    async def add_entry(
        self,
        food: FoodRef,
        portion: PortionSpec,
        meal_slot: MealSlot,
        day: date,
    ) -> DiaryEntry:
        """Log a food and persist it."""
        entry = self.aggregator.add_entry(food, portion, meal_slot, day)
        stored = await self._write(WriteAction.CREATE, entry)
        await self._record_recent(food)
        return stored

    async def edit_portion(self, entry_id: str, portion: PortionSpec) -> DiaryEntry:
        """Change an entry's portion and persist it."""
        entry = self.aggregator.edit_portion(entry_id, portion)
        if self._not_stored_yet(entry_id):
            return entry
        return await self._write(WriteAction.UPDATE, entry)

    async def delete_entry(self, entry_id: str) -> DiaryEntry:
        """Delete an entry locally and on the backend."""
        entry = self.aggregator.delete_entry(entry_id)
        never_stored = self._not_stored_yet(entry_id)
        self._drop_pending(entry_id)
        if never_stored:
            return entry
        try:
            await self.repository.delete_diary_entry(entry_id)
        except Exception as exc:
            self._enqueue(PendingWrite(WriteAction.DELETE, entry_id))
            raise PersistenceFailure(
                f"Failed to delete diary entry {entry_id}"
            ) from exc
        return entry

    async def retry_pending(self) -> int:
        """Replay queued writes and return how many are still pending."""
        queued, self.pending = self.pending, []
        for write in queued:
            try:
                if write.action == WriteAction.DELETE:
                    await self.repository.delete_diary_entry(write.entry_id)
                    continue
                entry = self.aggregator.get_entry(write.entry_id)
                await self._write(write.action, entry)
            except DiaryEntryNotFound:
                _logger.info("Dropping queued %s for %s", write.action, write.entry_id)
            except PersistenceFailure:
                continue
            except Exception:
                _logger.exception(
                    "Retry of %s %s failed", write.action, write.entry_id
                )
                self._enqueue(write)
        return len(self.pending)

    async def _write(self, action: WriteAction, entry: DiaryEntry) -> DiaryEntry:
        sent_portion = entry.portion
        if action == WriteAction.CREATE:
            self._in_flight.add(entry.id)
        try:
            if action == WriteAction.CREATE:
                stored = await self.repository.create_diary_entry(entry)
            else:
                stored = await self.repository.update_diary_entry(entry)
        except Exception as exc:
            _logger.warning("Diary %s failed for %s: %s", action, entry.id, exc)
            self._enqueue(PendingWrite(action, entry.id))
            raise PersistenceFailure(
                f"Failed to {action} diary entry {entry.id}"
            ) from exc
        finally:
            self._in_flight.discard(entry.id)
        try:
            canonical = self.aggregator.reconcile(entry.id, stored)
        except DiaryEntryNotFound:
            # Deleted locally while the write was in flight.
            _logger.info("Entry %s deleted before %s completed", entry.id, action)
            try:
                await self.repository.delete_diary_entry(stored.id)
            except Exception:
                self._enqueue(PendingWrite(WriteAction.DELETE, stored.id))
            return stored
        if entry.portion != sent_portion:
            # Edited while the write was in flight; send the newer portion.
            canonical = self.aggregator.edit_portion(canonical.id, entry.portion)
            return await self._write(WriteAction.UPDATE, canonical)
        return canonical

    async def _record_recent(self, food: FoodRef) -> None:
        if self.library_service is None:
            return
        try:
            await self.library_service.record_recent(food)
        except Exception:
            _logger.warning("Failed to record recent food %s", food.food_id)

    def _not_stored_yet(self, entry_id: str) -> bool:
        return entry_id in self._in_flight or self._has_pending(
            WriteAction.CREATE, entry_id
        )

    def _has_pending(self, action: WriteAction, entry_id: str) -> bool:
        return any(
            write.action == action and write.entry_id == entry_id
            for write in self.pending
        )

    def _enqueue(self, write: PendingWrite) -> None:
        if write not in self.pending:
            self.pending.append(write)

    def _drop_pending(self, entry_id: str) -> None:
        self.pending = [write for write in self.pending if write.entry_id != entry_id]
