"""Services for favorites, recent foods and custom foods."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from nutrition_diary.domain.diary import FoodRef
from nutrition_diary.domain.library import LibraryFood
from nutrition_diary.domain.nutrition import NutrientValue, RawNutrientRecord
from nutrition_diary.services.normalizer import NUTRIENT_TAGS, normalize_record


class LibraryRepository(Protocol):
    """Backend interface for the user's food lists."""

    async def list_favorites(self) -> list[LibraryFood]:
        """Return favorite foods."""

    async def add_favorite(self, food: LibraryFood) -> LibraryFood:
        """Add a food to favorites and return the stored record."""

    async def remove_favorite(self, food_id: str) -> None:
        """Remove a food from favorites."""

    async def list_recent_foods(self, limit: int) -> list[LibraryFood]:
        """Return recently logged foods."""

    async def touch_recent_food(self, food: LibraryFood) -> LibraryFood:
        """Insert or refresh a recent food."""

    async def clear_recent_foods(self) -> None:
        """Forget all recent foods."""

    async def list_custom_foods(self) -> list[LibraryFood]:
        """Return user-created foods."""

    async def add_custom_food(self, food: LibraryFood) -> LibraryFood:
        """Create a custom food and return the stored record."""

    async def delete_custom_food(self, food_id: str) -> None:
        """Delete a user-created food."""


@dataclass
class FoodLibraryService:
    """Application service for the user's food lists."""

    repository: LibraryRepository
    recent_limit: int = 10

    async def favorites(self) -> list[LibraryFood]:
        """Return favorite foods."""
        return await self.repository.list_favorites()

    async def toggle_favorite(self, food: FoodRef) -> bool:
        """Flip a food's favorite status and return the new status."""
        favorites = await self.repository.list_favorites()
        if any(item.food_id == food.food_id for item in favorites):
            await self.repository.remove_favorite(food.food_id)
            return False
        await self.repository.add_favorite(_library_food(food))
        return True

    async def record_recent(self, food: FoodRef) -> LibraryFood:
        """Mark a food as recently used."""
        return await self.repository.touch_recent_food(
            _library_food(food, accessed_at=datetime.now(tz=UTC))
        )

    async def recents(self, limit: int | None = None) -> list[LibraryFood]:
        """Return valid recent foods, most recently used first."""
        resolved_limit = limit or self.recent_limit
        items = await self.repository.list_recent_foods(resolved_limit)
        valid = [
            item
            for item in items
            if item.name.strip()
            and item.food_id.strip()
            and item.facts.calories_per_100g >= 0
        ]
        return self._rank(valid)[:resolved_limit]

    async def clear_recents(self) -> None:
        """Forget all recent foods."""
        await self.repository.clear_recent_foods()

    async def custom_foods(self) -> list[LibraryFood]:
        """Return user-created foods."""
        return await self.repository.list_custom_foods()

    async def delete_custom_food(self, food_id: str) -> bool:
        """Delete a custom food and report whether it existed."""
        foods = await self.repository.list_custom_foods()
        if not any(food.food_id == food_id for food in foods):
            return False
        await self.repository.delete_custom_food(food_id)
        return True

    async def create_custom_food(  # noqa: PLR0913
        self,
        name: str,
        serving_size_g: float,
        calories: float,
        protein_g: float,
        carbs_g: float,
        fat_g: float,
    ) -> LibraryFood:
        """Create a custom food from per-serving label values.

        The values go through the same normalizer as lookup records so a
        custom food is stored per 100 g like every other food.
        """
        if not serving_size_g > 0:
            raise ValueError("Serving size must be positive")
        food_id = f"custom-{uuid4()}"
        record = RawNutrientRecord(
            source_id=food_id,
            description=name,
            serving_size=serving_size_g,
            serving_unit="g",
            nutrients=(
                NutrientValue(NUTRIENT_TAGS["calories"][:1], "Energy", calories),
                NutrientValue(NUTRIENT_TAGS["protein"][:1], "Protein", protein_g),
                NutrientValue(NUTRIENT_TAGS["carbs"][:1], None, carbs_g),
                NutrientValue(NUTRIENT_TAGS["fat"][:1], None, fat_g),
            ),
            serving_weight_g=serving_size_g,
        )
        food = LibraryFood(
            food_id=food_id,
            name=name,
            facts=normalize_record(record),
            is_custom=True,
        )
        return await self.repository.add_custom_food(food)

    @staticmethod
    def _rank(items: list[LibraryFood]) -> list[LibraryFood]:
        """Rank foods by most recent access."""
        return sorted(
            items,
            key=lambda item: item.last_accessed_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )


def _library_food(food: FoodRef, accessed_at: datetime | None = None) -> LibraryFood:
    return LibraryFood(
        food_id=food.food_id,
        name=food.name,
        facts=food.facts,
        is_custom=food.facts.source_id.startswith("custom-"),
        last_accessed_at=accessed_at,
    )
