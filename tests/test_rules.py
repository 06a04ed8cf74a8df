"""Tests for keyword rule tables."""

import pytest

from nutrition_diary.domain.diary import MealSlot
from nutrition_diary.services.rules import (
    ESTIMATION_RULES,
    MEAL_SLOT_RULES,
    Rule,
    estimate_facts,
    first_match,
    infer_meal_slot,
)


@pytest.mark.parametrize(
    ("description", "rule_name"),
    [
        ("Grilled Chicken Breast", "protein"),
        ("Chicken fried rice", "protein"),
        ("Greek yogurt, plain", "dairy"),
        ("Whole wheat bread", "grains"),
        ("Banana, raw", "fruit"),
        ("Baby spinach", "vegetables"),
        ("Almonds, roasted", "nuts_seeds"),
        ("Cola", "beverages"),
        ("Dark chocolate bar", "sweets"),
        ("Mystery casserole", "default"),
    ],
)
def test_estimate_facts_first_match_wins(description: str, rule_name: str) -> None:
    facts = estimate_facts(description)

    assert facts.source_id == f"estimate:{rule_name}"
    assert facts.estimated is True


def test_default_template_values() -> None:
    facts = estimate_facts("")

    assert facts.calories_per_100g == 100
    assert facts.protein_per_100g == 1.3
    assert facts.carbs_per_100g == 15.0
    assert facts.fat_per_100g == 3.9


def test_every_table_ends_with_catch_all() -> None:
    assert ESTIMATION_RULES[-1].keywords == ()
    assert MEAL_SLOT_RULES[-1].keywords == ()


def test_first_match_without_default_raises() -> None:
    rules = (Rule("tea", ("tea",), 1),)

    with pytest.raises(LookupError):
        first_match(rules, "coffee")


def test_rule_matching_is_case_insensitive() -> None:
    assert Rule("milk", ("milk",), None).matches("Whole MILK")


@pytest.mark.parametrize(
    ("description", "slot"),
    [
        ("Scrambled eggs", MealSlot.BREAKFAST),
        ("Tomato soup", MealSlot.LUNCH),
        ("Beef stew", MealSlot.DINNER),
        ("Potato chips", MealSlot.SNACK),
        ("Something unusual", MealSlot.DINNER),
    ],
)
def test_infer_meal_slot(description: str, slot: MealSlot) -> None:
    assert infer_meal_slot(description) == slot
