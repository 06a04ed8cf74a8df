"""Pydantic models for API request payloads."""

from datetime import date

from pydantic import BaseModel, Field

from nutrition_diary.domain.diary import MealSlot
from nutrition_diary.domain.portions import PortionSpec, PortionUnit


class PortionPayload(BaseModel):
    """Portion as entered by the user."""

    size: float
    unit: PortionUnit = PortionUnit.GRAM
    grams_per_unit: float | None = None

    def to_spec(self) -> PortionSpec:
        """Convert to the domain portion."""
        return PortionSpec(
            size=self.size, unit=self.unit, grams_per_unit=self.grams_per_unit
        )


class AddEntryPayload(BaseModel):
    """Request body for logging a food."""

    food_id: str = Field(min_length=1)
    meal_slot: MealSlot
    day: date
    portion: PortionPayload


class EditPortionPayload(BaseModel):
    """Request body for changing an entry's portion."""

    portion: PortionPayload


class FavoritePayload(BaseModel):
    """Request body for toggling a favorite."""

    food_id: str = Field(min_length=1)


class CustomFoodPayload(BaseModel):
    """Request body for creating a custom food from label values."""

    name: str = Field(min_length=1)
    serving_size_g: float
    calories: float
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0


class CalorieGoalPayload(BaseModel):
    """Request body for changing the daily calorie goal."""

    calories: int = Field(ge=0)
