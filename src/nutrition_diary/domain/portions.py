"""Portion and scaled nutrition models."""

from dataclasses import dataclass
from enum import StrEnum


class InvalidPortionSpec(ValueError):
    """Raised when a portion cannot be converted to grams."""


class PortionUnit(StrEnum):
    """Units a user may log a portion in."""

    GRAM = "gram"
    MILLILITER = "milliliter"
    TABLESPOON = "tablespoon"
    TEASPOON = "teaspoon"
    CUP = "cup"
    OUNCE = "ounce"
    PIECE = "piece"
    SLICE = "slice"


@dataclass(frozen=True)
class PortionSpec:
    """User-declared quantity and unit for one instance of a food.

    Count units (piece, slice) carry their own gram weight in
    ``grams_per_unit``; without it they cannot be scaled.
    """

    size: float
    unit: PortionUnit = PortionUnit.GRAM
    grams_per_unit: float | None = None


@dataclass(frozen=True)
class ScaledNutrition:
    """Nutrition for a concrete portion."""

    calories: int
    protein: float
    carbs: float
    fat: float
    weight_in_grams: float

    def __add__(self, other: "ScaledNutrition") -> "ScaledNutrition":
        """Sum two portions, keeping macros at one decimal."""
        return ScaledNutrition(
            calories=self.calories + other.calories,
            protein=round(self.protein + other.protein, 1),
            carbs=round(self.carbs + other.carbs, 1),
            fat=round(self.fat + other.fat, 1),
            weight_in_grams=round(self.weight_in_grams + other.weight_in_grams, 2),
        )

    def __sub__(self, other: "ScaledNutrition") -> "ScaledNutrition":
        """Difference of two portions; the result may be negative."""
        return ScaledNutrition(
            calories=self.calories - other.calories,
            protein=round(self.protein - other.protein, 1),
            carbs=round(self.carbs - other.carbs, 1),
            fat=round(self.fat - other.fat, 1),
            weight_in_grams=round(self.weight_in_grams - other.weight_in_grams, 2),
        )


ZERO_NUTRITION = ScaledNutrition(
    calories=0, protein=0.0, carbs=0.0, fat=0.0, weight_in_grams=0.0
)
