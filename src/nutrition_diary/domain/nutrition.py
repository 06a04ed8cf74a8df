"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutrientValue:
    """One nutrient amount as reported by the lookup source.

    ``tags`` holds every identifier the source attached to the nutrient,
    modern ids and legacy nutrient numbers alike.
    """

    tags: tuple[int, ...]
    name: str | None
    amount: float | None
    unit: str | None = None


@dataclass(frozen=True)
class RawNutrientRecord:
    """Unnormalized food record from the lookup source.

    ``serving_size`` is the quantity the nutrient amounts are reported
    against. ``serving_weight_g`` is the weight of one labelled serving,
    when the source declares one.
    """

    source_id: str
    description: str
    serving_size: float | None
    serving_unit: str | None
    nutrients: tuple[NutrientValue, ...]
    serving_weight_g: float | None = None


@dataclass(frozen=True)
class NutritionFacts:
    """Canonical per-100g energy and macro profile for a food."""

    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    source_id: str
    source_label: str
    estimated: bool = False
    serving_size_g: float | None = None
