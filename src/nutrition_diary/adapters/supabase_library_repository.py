"""Supabase implementation for favorites, recents and custom foods."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_diary.domain.library import LibraryFood
from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.services.library import LibraryRepository


@dataclass
class SupabaseLibraryRepository(LibraryRepository):
    """Supabase-backed repository for the user's food lists."""

    client: Client
    user_id: str

    async def list_favorites(self) -> list[LibraryFood]:
        """Return favorite foods."""
        return await asyncio.to_thread(self._list, "favorite_foods", "created_at")

    async def add_favorite(self, food: LibraryFood) -> LibraryFood:
        """Add a food to favorites."""
        return await asyncio.to_thread(self._insert, "favorite_foods", food)

    async def remove_favorite(self, food_id: str) -> None:
        """Remove a food from favorites."""
        await asyncio.to_thread(self._remove, "favorite_foods", food_id)

    async def list_recent_foods(self, limit: int) -> list[LibraryFood]:
        """Return recent foods by last access."""
        return await asyncio.to_thread(
            self._list, "recent_foods", "last_accessed", limit
        )

    async def touch_recent_food(self, food: LibraryFood) -> LibraryFood:
        """Upsert a recent food and refresh its access time."""
        return await asyncio.to_thread(self._touch_recent, food)

    async def clear_recent_foods(self) -> None:
        """Delete every recent food row for the user."""
        await asyncio.to_thread(self._clear, "recent_foods")

    async def list_custom_foods(self) -> list[LibraryFood]:
        """Return user-created foods."""
        return await asyncio.to_thread(self._list, "custom_foods", "created_at")

    async def add_custom_food(self, food: LibraryFood) -> LibraryFood:
        """Create a custom food."""
        return await asyncio.to_thread(self._insert, "custom_foods", food)

    async def delete_custom_food(self, food_id: str) -> None:
        """Delete a custom food."""
        await asyncio.to_thread(self._remove, "custom_foods", food_id)

    def _list(
        self, table: str, order_column: str, limit: int | None = None
    ) -> list[LibraryFood]:
        query = (
            self.client.table(table)
            .select("*")
            .eq("user_id", self.user_id)
            .order(order_column, desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [_parse_food(row) for row in response.data or []]

    def _insert(self, table: str, food: LibraryFood) -> LibraryFood:
        response = (
            self.client.table(table)
            .insert({"user_id": self.user_id, **_food_row(food)})
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to add food to {table}")
        return _parse_food(response.data[0])

    def _remove(self, table: str, food_id: str) -> None:
        self.client.table(table).delete().eq("user_id", self.user_id).eq(
            "food_id", food_id
        ).execute()

    def _clear(self, table: str) -> None:
        self.client.table(table).delete().eq("user_id", self.user_id).execute()

    def _touch_recent(self, food: LibraryFood) -> LibraryFood:
        accessed_at = food.last_accessed_at or datetime.now(tz=UTC)
        response = (
            self.client.table("recent_foods")
            .upsert(
                {
                    "user_id": self.user_id,
                    **_food_row(food),
                    "last_accessed": accessed_at.isoformat(),
                },
                on_conflict="user_id,food_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record recent food")
        return _parse_food(response.data[0])


def _food_row(food: LibraryFood) -> dict[str, object]:
    facts = food.facts
    return {
        "food_id": food.food_id,
        "food_name": food.name,
        "calories_per_100g": facts.calories_per_100g,
        "protein_per_100g": facts.protein_per_100g,
        "carbs_per_100g": facts.carbs_per_100g,
        "fat_per_100g": facts.fat_per_100g,
        "serving_size_g": facts.serving_size_g,
        "is_custom_food": food.is_custom,
    }


def _parse_food(row: dict[str, object]) -> LibraryFood:
    """Parse a food list row into a domain model."""
    last_accessed_raw = row.get("last_accessed")
    last_accessed_at = (
        datetime.fromisoformat(last_accessed_raw)
        if isinstance(last_accessed_raw, str) and last_accessed_raw
        else None
    )
    food_id = str(row.get("food_id") or "")
    name = str(row.get("food_name") or "")
    serving_size = row.get("serving_size_g")
    return LibraryFood(
        food_id=food_id,
        name=name,
        facts=NutritionFacts(
            calories_per_100g=float(row.get("calories_per_100g") or 0.0),
            protein_per_100g=float(row.get("protein_per_100g") or 0.0),
            carbs_per_100g=float(row.get("carbs_per_100g") or 0.0),
            fat_per_100g=float(row.get("fat_per_100g") or 0.0),
            source_id=food_id,
            source_label=name,
            serving_size_g=float(serving_size) if serving_size is not None else None,
        ),
        is_custom=bool(row.get("is_custom_food", False)),
        last_accessed_at=last_accessed_at,
    )
