"""Normalization of raw lookup records into per-100g nutrition facts."""

import logging
from collections.abc import Sequence
from dataclasses import replace

from nutrition_diary.domain.nutrition import (
    NutrientValue,
    NutritionFacts,
    RawNutrientRecord,
)
from nutrition_diary.services.rules import ESTIMATION_RULES, Rule, estimate_facts

# Tag aliases per nutrient, highest priority first. Modern FDC ids come
# before the legacy SR nutrient numbers.
NUTRIENT_TAGS: dict[str, tuple[int, ...]] = {
    "calories": (1008, 2047, 2048, 208),
    "protein": (1003, 203),
    "carbs": (1005, 205),
    "fat": (1004, 204),
}

NUTRIENT_NAMES: dict[str, str] = {
    "calories": "Energy",
    "protein": "Protein",
    "carbs": "Carbohydrate, by difference",
    "fat": "Total lipid (fat)",
}

MAX_CALORIES_PER_100G = 900.0
BASELINE_GRAMS = 100.0
_MASS_UNITS = {"g", "gm", "grm", "gram", "grams", "ml", "mlt", "milliliter"}

_logger = logging.getLogger(__name__)


def normalize_record(
    record: RawNutrientRecord,
    rules: Sequence[Rule[NutritionFacts]] = ESTIMATION_RULES,
) -> NutritionFacts:
    """Convert a raw record to per-100g facts, estimating when data is unusable."""
    calories = find_nutrient(record.nutrients, "calories")
    protein = find_nutrient(record.nutrients, "protein")
    carbs = find_nutrient(record.nutrients, "carbs")
    fat = find_nutrient(record.nutrients, "fat")

    factor = _basis_factor(record.serving_size)
    calories, protein, carbs, fat = (
        None if value is None else value * factor
        for value in (calories, protein, carbs, fat)
    )

    if not is_plausible_energy(calories):
        calories = atwater_calories(protein or 0.0, carbs or 0.0, fat or 0.0)

    if not is_plausible_energy(calories) or None in (protein, carbs, fat):
        _logger.debug(
            "Estimating nutrition for %s (%r): "
            "calories=%s protein=%s carbs=%s fat=%s",
            record.source_id,
            record.description,
            calories,
            protein,
            carbs,
            fat,
        )
        return replace(
            estimate_facts(record.description, rules),
            source_id=record.source_id,
            source_label=record.description,
            serving_size_g=record.serving_weight_g,
        )

    return NutritionFacts(
        calories_per_100g=max(calories, 0.0),
        protein_per_100g=max(protein, 0.0),
        carbs_per_100g=max(carbs, 0.0),
        fat_per_100g=max(fat, 0.0),
        source_id=record.source_id,
        source_label=record.description,
        serving_size_g=record.serving_weight_g,
    )


def find_nutrient(nutrients: Sequence[NutrientValue], key: str) -> float | None:
    """Return the first nutrient amount matching the aliases for ``key``."""
    for tag in NUTRIENT_TAGS[key]:
        for nutrient in nutrients:
            if tag in nutrient.tags and nutrient.amount is not None:
                return nutrient.amount
    name = NUTRIENT_NAMES[key]
    for nutrient in nutrients:
        if nutrient.amount is None or not nutrient.name:
            continue
        if name not in nutrient.name:
            continue
        if key == "calories" and (nutrient.unit or "").lower() == "kj":
            continue
        return nutrient.amount
    return None


def atwater_calories(protein: float, carbs: float, fat: float) -> float:
    """Estimate energy from macros using 4/4/9 kcal per gram."""
    return protein * 4 + carbs * 4 + fat * 9


def is_plausible_energy(calories: float | None) -> bool:
    """Return True if a per-100g energy value is within (0, 900]."""
    return calories is not None and 0 < calories <= MAX_CALORIES_PER_100G


def _basis_factor(serving_size: float | None) -> float:
    if serving_size is None or serving_size <= 0:
        return 1.0
    return BASELINE_GRAMS / serving_size


def parse_fdc_food(payload: dict[str, object]) -> RawNutrientRecord:
    """Build a raw record from an FDC search hit or food detail payload.

    FDC reports ``foodNutrients`` per 100 g for every data type, so the
    record basis is always 100 g. The labelled serving is kept separately
    when it is given in grams or milliliters.
    """
    nutrients = tuple(
        _parse_fdc_nutrient(item)
        for item in payload.get("foodNutrients") or []
        if isinstance(item, dict)
    )
    serving_weight = None
    serving_size = _to_float(payload.get("servingSize"))
    serving_unit = str(payload.get("servingSizeUnit") or "g").lower()
    if serving_size and serving_size > 0 and serving_unit in _MASS_UNITS:
        serving_weight = serving_size
    return RawNutrientRecord(
        source_id=str(payload.get("fdcId") or ""),
        description=str(payload.get("description") or ""),
        serving_size=BASELINE_GRAMS,
        serving_unit="g",
        nutrients=nutrients,
        serving_weight_g=serving_weight,
    )


def _parse_fdc_nutrient(item: dict[str, object]) -> NutrientValue:
    info = item.get("nutrient")
    if not isinstance(info, dict):
        info = {}
    tags = tuple(
        tag
        for tag in (
            _to_int(item.get("nutrientId")),
            _to_int(info.get("id")),
            _to_int(item.get("nutrientNumber")),
            _to_int(info.get("number")),
        )
        if tag is not None
    )
    amount = item.get("value")
    if amount is None:
        amount = item.get("amount")
    return NutrientValue(
        tags=tags,
        name=_to_str(item.get("nutrientName") or info.get("name")),
        amount=_to_float(amount),
        unit=_to_str(item.get("unitName") or info.get("unitName")),
    )


def _to_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _to_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _to_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
