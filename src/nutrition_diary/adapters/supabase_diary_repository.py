"""Supabase repository for diary entries."""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from nutrition_diary.domain.diary import DiaryEntry, FoodRef, MealSlot
from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.domain.portions import PortionSpec, PortionUnit, ScaledNutrition
from nutrition_diary.services.sync import DiaryRepository

_TABLE = "food_entries"


@dataclass
class SupabaseDiaryRepository(DiaryRepository):
    """Supabase implementation for diary entries."""

    client: Client
    user_id: str

    async def create_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        """Insert an entry row and return the stored entry."""
        return await asyncio.to_thread(self._create, entry)

    async def update_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        """Update an entry's portion and totals."""
        return await asyncio.to_thread(self._update, entry)

    async def delete_diary_entry(self, entry_id: str) -> None:
        """Delete an entry row."""
        await asyncio.to_thread(self._delete, entry_id)

    async def list_diary_entries(self, day: date) -> list[DiaryEntry]:
        """Return entries for a day."""
        return await asyncio.to_thread(self._list, day)

    def _create(self, entry: DiaryEntry) -> DiaryEntry:
        response = (
            self.client.table(_TABLE)
            .insert({"user_id": self.user_id, **_entry_row(entry)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create diary entry")
        return _parse_entry(response.data[0])

    def _update(self, entry: DiaryEntry) -> DiaryEntry:
        row = _entry_row(entry)
        response = (
            self.client.table(_TABLE)
            .update({key: row[key] for key in _PORTION_COLUMNS})
            .eq("id", entry.id)
            .eq("user_id", self.user_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update diary entry {entry.id}")
        return _parse_entry(response.data[0])

    def _delete(self, entry_id: str) -> None:
        response = (
            self.client.table(_TABLE)
            .delete()
            .eq("id", entry_id)
            .eq("user_id", self.user_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Diary entry {entry_id} not found")

    def _list(self, day: date) -> list[DiaryEntry]:
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", self.user_id)
            .eq("entry_date", day.isoformat())
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


_PORTION_COLUMNS = (
    "serving_size",
    "serving_unit",
    "grams_per_unit",
    "weight_grams",
    "total_calories",
    "total_protein",
    "total_carbs",
    "total_fat",
)


def _entry_row(entry: DiaryEntry) -> dict[str, object]:
    facts = entry.food.facts
    return {
        "meal_type": str(entry.meal_slot),
        "food_id": entry.food.food_id,
        "food_name": entry.food.name,
        "source_label": facts.source_label,
        "is_estimated": facts.estimated,
        "calories_per_100g": facts.calories_per_100g,
        "protein_per_100g": facts.protein_per_100g,
        "carbs_per_100g": facts.carbs_per_100g,
        "fat_per_100g": facts.fat_per_100g,
        "serving_size": entry.portion.size,
        "serving_unit": str(entry.portion.unit),
        "grams_per_unit": entry.portion.grams_per_unit,
        "weight_grams": entry.scaled.weight_in_grams,
        "total_calories": entry.scaled.calories,
        "total_protein": entry.scaled.protein,
        "total_carbs": entry.scaled.carbs,
        "total_fat": entry.scaled.fat,
        "entry_date": entry.entry_date.isoformat(),
        "created_at": entry.created_at.isoformat(),
    }


def _parse_entry(row: dict[str, object]) -> DiaryEntry:
    food_id = str(row.get("food_id") or "")
    facts = NutritionFacts(
        calories_per_100g=float(row.get("calories_per_100g") or 0.0),
        protein_per_100g=float(row.get("protein_per_100g") or 0.0),
        carbs_per_100g=float(row.get("carbs_per_100g") or 0.0),
        fat_per_100g=float(row.get("fat_per_100g") or 0.0),
        source_id=food_id,
        source_label=str(row.get("source_label") or row.get("food_name") or ""),
        estimated=bool(row.get("is_estimated", False)),
    )
    grams_per_unit = row.get("grams_per_unit")
    return DiaryEntry(
        id=str(row["id"]),
        food=FoodRef(
            food_id=food_id,
            name=str(row.get("food_name") or ""),
            facts=facts,
        ),
        meal_slot=MealSlot(str(row.get("meal_type") or MealSlot.SNACK)),
        portion=PortionSpec(
            size=float(row.get("serving_size") or 0.0),
            unit=PortionUnit(str(row.get("serving_unit") or PortionUnit.GRAM)),
            grams_per_unit=(
                float(grams_per_unit) if grams_per_unit is not None else None
            ),
        ),
        scaled=ScaledNutrition(
            calories=round(float(row.get("total_calories") or 0)),
            protein=float(row.get("total_protein") or 0.0),
            carbs=float(row.get("total_carbs") or 0.0),
            fat=float(row.get("total_fat") or 0.0),
            weight_in_grams=float(row.get("weight_grams") or 0.0),
        ),
        entry_date=date.fromisoformat(str(row["entry_date"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        synced=True,
    )
