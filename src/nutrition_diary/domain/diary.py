"""Domain models for the meal diary."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.domain.portions import PortionSpec, ScaledNutrition


class DiaryEntryNotFound(KeyError):
    """Raised when a diary entry id is unknown or already deleted."""


class MealSlot(StrEnum):
    """Meal a diary entry is logged under."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


# Share of the daily calorie goal budgeted to each meal slot.
MEAL_BUDGET_SHARES = {
    MealSlot.BREAKFAST: Decimal("0.3"),
    MealSlot.LUNCH: Decimal("0.3"),
    MealSlot.DINNER: Decimal("0.3"),
    MealSlot.SNACK: Decimal("0.1"),
}


def _half_up(value: Decimal) -> Decimal:
    return value.quantize(Decimal(1), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class NutritionGoals:
    """Daily calorie and macro targets."""

    calories: int
    protein: float
    carbs: float
    fat: float

    @classmethod
    def from_calories(cls, calories: int) -> "NutritionGoals":
        """Derive macro targets from a calorie goal.

        Carbs get half of the energy, protein and fat a quarter each, at 4, 4
        and 9 kcal per gram.
        """
        if calories < 0:
            raise ValueError("Calorie goal must not be negative")
        energy = Decimal(calories)
        return cls(
            calories=calories,
            protein=float(_half_up(energy * Decimal("0.25") / 4)),
            carbs=float(_half_up(energy * Decimal("0.5") / 4)),
            fat=float(_half_up(energy * Decimal("0.25") / 9)),
        )

    def meal_budgets(self) -> dict[MealSlot, int]:
        """Split the calorie goal across meal slots."""
        return {
            slot: int(_half_up(Decimal(self.calories) * share))
            for slot, share in MEAL_BUDGET_SHARES.items()
        }


DEFAULT_GOALS = NutritionGoals.from_calories(2800)


@dataclass(frozen=True)
class FoodRef:
    """Reference to a food and its per-100g baseline."""

    food_id: str
    name: str
    facts: NutritionFacts


@dataclass
class DiaryEntry:
    """One logged food instance tied to a day and meal slot."""

    id: str
    food: FoodRef
    meal_slot: MealSlot
    portion: PortionSpec
    scaled: ScaledNutrition
    entry_date: date
    created_at: datetime
    synced: bool = False


@dataclass(frozen=True)
class DailyTotals:
    """Daily consumed totals against the day's goals.

    ``calories_remaining`` never drops below zero, even past the goal.
    """

    day: date
    calories_consumed: int
    protein_consumed: float
    carbs_consumed: float
    fat_consumed: float
    calorie_goal: int
    protein_goal: float
    carbs_goal: float
    fat_goal: float
    calories_remaining: int
