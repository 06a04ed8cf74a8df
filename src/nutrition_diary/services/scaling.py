"""Portion scaling of per-100g nutrition facts."""

from decimal import ROUND_HALF_UP, Decimal

from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.domain.portions import (
    InvalidPortionSpec,
    PortionSpec,
    PortionUnit,
    ScaledNutrition,
)

# Milliliters assume water density.
GRAMS_PER_UNIT: dict[PortionUnit, float] = {
    PortionUnit.GRAM: 1.0,
    PortionUnit.MILLILITER: 1.0,
    PortionUnit.TABLESPOON: 15.0,
    PortionUnit.TEASPOON: 5.0,
    PortionUnit.CUP: 240.0,
    PortionUnit.OUNCE: 28.35,
}

COUNT_UNITS = frozenset({PortionUnit.PIECE, PortionUnit.SLICE})

_WHOLE = Decimal("1")
_TENTH = Decimal("0.1")
_HUNDREDTH = Decimal("0.01")


def validate_portion(portion: PortionSpec) -> None:
    """Raise InvalidPortionSpec if the portion cannot be scaled."""
    if not portion.size > 0:
        raise InvalidPortionSpec(f"Portion size must be positive, got {portion.size}")
    if portion.unit in COUNT_UNITS:
        if portion.grams_per_unit is None or not portion.grams_per_unit > 0:
            raise InvalidPortionSpec(
                f"Portion unit '{portion.unit}' needs a positive grams_per_unit"
            )
    elif portion.unit not in GRAMS_PER_UNIT:
        raise InvalidPortionSpec(f"Unsupported portion unit '{portion.unit}'")


def portion_weight_grams(portion: PortionSpec) -> float:
    """Convert a portion to its weight in grams."""
    validate_portion(portion)
    if portion.unit in COUNT_UNITS:
        per_unit = portion.grams_per_unit or 0.0
    else:
        per_unit = GRAMS_PER_UNIT[portion.unit]
    return _round(portion.size * per_unit, _HUNDREDTH)


def scale(facts: NutritionFacts, portion: PortionSpec) -> ScaledNutrition:
    """Scale per-100g facts to a portion.

    Pure and deterministic: every caller that scales the same facts to the
    same portion gets identical values. Calories round to whole kcal and
    macros to one decimal, both half-up.
    """
    grams = portion_weight_grams(portion)
    return ScaledNutrition(
        calories=int(_round(facts.calories_per_100g * grams / 100, _WHOLE)),
        protein=_round(facts.protein_per_100g * grams / 100, _TENTH),
        carbs=_round(facts.carbs_per_100g * grams / 100, _TENTH),
        fat=_round(facts.fat_per_100g * grams / 100, _TENTH),
        weight_in_grams=grams,
    )


def serving_portion(facts: NutritionFacts, count: float = 1) -> PortionSpec:
    """Return a piece portion weighted by the food's labelled serving."""
    if facts.serving_size_g is None:
        raise InvalidPortionSpec(f"No serving weight known for '{facts.source_label}'")
    return PortionSpec(
        size=count, unit=PortionUnit.PIECE, grams_per_unit=facts.serving_size_g
    )


def _round(value: float, quantum: Decimal) -> float:
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
