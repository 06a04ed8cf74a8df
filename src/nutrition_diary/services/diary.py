"""Diary aggregation with incrementally maintained daily totals."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, date, datetime
from uuid import uuid4

from nutrition_diary.domain.diary import (
    DEFAULT_GOALS,
    DailyTotals,
    DiaryEntry,
    DiaryEntryNotFound,
    FoodRef,
    MealSlot,
    NutritionGoals,
)
from nutrition_diary.domain.portions import (
    ZERO_NUTRITION,
    PortionSpec,
    ScaledNutrition,
)
from nutrition_diary.services.scaling import scale

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _local_id() -> str:
    return f"local-{uuid4()}"


class DiaryAggregator:
    """Owns diary entries and their per-day totals.

    All mutation goes through ``add_entry``, ``edit_portion``,
    ``delete_entry`` and ``reconcile``. Each one adjusts the day's totals by
    exactly the change in the entry's scaled nutrition, so totals always
    equal the sum of the live entries without a recompute pass.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _local_id,
        goals: NutritionGoals = DEFAULT_GOALS,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self.goals = goals
        self._entries: dict[str, DiaryEntry] = {}
        self._totals: dict[date, ScaledNutrition] = {}

    def add_entry(
        self,
        food: FoodRef,
        portion: PortionSpec,
        meal_slot: MealSlot,
        day: date,
    ) -> DiaryEntry:
        """Log a food portion and add it to the day's totals."""
        scaled = scale(food.facts, portion)
        entry = DiaryEntry(
            id=self._id_factory(),
            food=food,
            meal_slot=MealSlot(meal_slot),
            portion=portion,
            scaled=scaled,
            entry_date=day,
            created_at=self._clock(),
        )
        self._entries[entry.id] = entry
        self._add(day, scaled)
        _logger.debug("Diary add %s: %s kcal on %s", entry.id, scaled.calories, day)
        return entry

    def edit_portion(self, entry_id: str, new_portion: PortionSpec) -> DiaryEntry:
        """Rescale an entry to a new portion and apply the delta to totals."""
        entry = self.get_entry(entry_id)
        new_scaled = scale(entry.food.facts, new_portion)
        self._add(entry.entry_date, new_scaled - entry.scaled)
        entry.portion = new_portion
        entry.scaled = new_scaled
        entry.synced = False
        return entry

    def delete_entry(self, entry_id: str) -> DiaryEntry:
        """Remove an entry and subtract it from the day's totals."""
        entry = self.get_entry(entry_id)
        del self._entries[entry_id]
        self._subtract(entry.entry_date, entry.scaled)
        return entry

    def reconcile(self, entry_id: str, server_entry: DiaryEntry) -> DiaryEntry:
        """Overwrite a tentative local entry with the server's copy."""
        local = self.get_entry(entry_id)
        self._subtract(local.entry_date, local.scaled)
        del self._entries[entry_id]
        canonical = replace(server_entry, synced=True)
        if canonical.id in self._entries:
            existing = self._entries.pop(canonical.id)
            self._subtract(existing.entry_date, existing.scaled)
        self._entries[canonical.id] = canonical
        self._add(canonical.entry_date, canonical.scaled)
        if canonical.scaled != local.scaled:
            _logger.info(
                "Diary entry %s reconciled to server value (%s -> %s kcal)",
                canonical.id,
                local.scaled.calories,
                canonical.scaled.calories,
            )
        return canonical

    def load_entries(
        self,
        day: date,
        entries: Iterable[DiaryEntry],
        keep: Iterable[str] = (),
    ) -> DailyTotals:
        """Replace a day's entries with a snapshot from the backend.

        Local entries whose ids are in ``keep`` survive the refresh and take
        precedence over a server copy with the same id. Their nutrition is
        added on top of the snapshot.
        """
        keep_ids = set(keep)
        kept = [entry for entry in self.entries_for(day) if entry.id in keep_ids]
        for entry in self.entries_for(day):
            del self._entries[entry.id]
        total = ZERO_NUTRITION
        for entry in entries:
            if entry.id in keep_ids:
                continue
            self._entries[entry.id] = replace(entry, synced=True)
            total = total + entry.scaled
        for entry in kept:
            self._entries[entry.id] = entry
            total = total + entry.scaled
        if kept:
            _logger.debug("Kept %d unsynced entries on %s", len(kept), day)
        self._totals[day] = total
        return self.totals_for(day)

    def set_calorie_goal(self, calories: int) -> NutritionGoals:
        """Replace the daily goals with ones derived from a calorie target."""
        self.goals = NutritionGoals.from_calories(calories)
        return self.goals

    def get_entry(self, entry_id: str) -> DiaryEntry:
        """Return a live entry or raise DiaryEntryNotFound."""
        entry = self._entries.get(entry_id)
        if entry is None:
            raise DiaryEntryNotFound(entry_id)
        return entry

    def entries_for(
        self, day: date, meal_slot: MealSlot | None = None
    ) -> list[DiaryEntry]:
        """Return live entries for a day, oldest first."""
        entries = [
            entry
            for entry in self._entries.values()
            if entry.entry_date == day
            and (meal_slot is None or entry.meal_slot == meal_slot)
        ]
        return sorted(entries, key=lambda entry: entry.created_at)

    def totals_for(self, day: date) -> DailyTotals:
        """Return consumed totals and goals for a day."""
        total = self._totals.get(day, ZERO_NUTRITION)
        return DailyTotals(
            day=day,
            calories_consumed=total.calories,
            protein_consumed=total.protein,
            carbs_consumed=total.carbs,
            fat_consumed=total.fat,
            calorie_goal=self.goals.calories,
            protein_goal=self.goals.protein,
            carbs_goal=self.goals.carbs,
            fat_goal=self.goals.fat,
            calories_remaining=max(self.goals.calories - total.calories, 0),
        )

    def meal_calories(self, day: date) -> dict[MealSlot, int]:
        """Return calories per meal slot for a day."""
        calories = dict.fromkeys(MealSlot, 0)
        for entry in self.entries_for(day):
            calories[entry.meal_slot] += entry.scaled.calories
        return calories

    def meal_budgets(self) -> dict[MealSlot, int]:
        """Return the calorie budget of each meal slot."""
        return self.goals.meal_budgets()

    def _add(self, day: date, delta: ScaledNutrition) -> None:
        self._totals[day] = self._totals.get(day, ZERO_NUTRITION) + delta

    def _subtract(self, day: date, amount: ScaledNutrition) -> None:
        current = self._totals.get(day, ZERO_NUTRITION) - amount
        clamped = ScaledNutrition(
            calories=max(current.calories, 0),
            protein=max(current.protein, 0.0),
            carbs=max(current.carbs, 0.0),
            fat=max(current.fat, 0.0),
            weight_in_grams=max(current.weight_in_grams, 0.0),
        )
        if clamped != current:
            _logger.debug("Totals for %s clamped at zero from %s", day, current)
        self._totals[day] = clamped
