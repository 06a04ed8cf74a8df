"""Ordered keyword rule tables.

Each table is evaluated top to bottom against a lowercased description and
the first rule whose keywords hit wins. The last rule of every table has no
keywords and therefore always matches, so a lookup never comes back empty.

Estimation priority (first match wins):

1. protein-forward foods (meat, fish, eggs, tofu)
2. dairy
3. grains and starches
4. fruit
5. vegetables
6. nuts and seeds
7. beverages
8. sweets
9. default
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from nutrition_diary.domain.diary import MealSlot
from nutrition_diary.domain.nutrition import NutritionFacts

T = TypeVar("T")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """Keyword predicate paired with the value it yields."""

    name: str
    keywords: tuple[str, ...]
    result: T

    def matches(self, text: str) -> bool:
        """Return True if any keyword is a substring of ``text``."""
        if not self.keywords:
            return True
        lowered = text.lower()
        return any(keyword in lowered for keyword in self.keywords)


def first_match(rules: Sequence[Rule[T]], text: str) -> Rule[T]:
    """Return the first rule matching ``text``."""
    for rule in rules:
        if rule.matches(text):
            return rule
    raise LookupError("Rule table has no default entry")


def _template(
    name: str, calories: float, protein: float, carbs: float, fat: float
) -> NutritionFacts:
    return NutritionFacts(
        calories_per_100g=calories,
        protein_per_100g=protein,
        carbs_per_100g=carbs,
        fat_per_100g=fat,
        source_id=f"estimate:{name}",
        source_label=name,
        estimated=True,
    )


ESTIMATION_RULES: tuple[Rule[NutritionFacts], ...] = (
    Rule(
        "protein",
        (
            "chicken",
            "beef",
            "pork",
            "turkey",
            "lamb",
            "steak",
            "meat",
            "fish",
            "salmon",
            "tuna",
            "shrimp",
            "egg",
            "tofu",
        ),
        _template("protein", 200, 25.0, 0.0, 11.0),
    ),
    Rule(
        "dairy",
        ("milk", "cheese", "yogurt", "yoghurt", "cream", "butter", "kefir"),
        _template("dairy", 120, 6.0, 5.0, 8.0),
    ),
    Rule(
        "grains",
        (
            "rice",
            "pasta",
            "bread",
            "oat",
            "cereal",
            "noodle",
            "flour",
            "potato",
            "quinoa",
            "corn",
            "bagel",
        ),
        _template("grains", 250, 8.0, 50.0, 2.0),
    ),
    Rule(
        "fruit",
        (
            "apple",
            "banana",
            "orange",
            "berry",
            "grape",
            "mango",
            "pear",
            "peach",
            "melon",
            "fruit",
        ),
        _template("fruit", 55, 0.7, 14.0, 0.2),
    ),
    Rule(
        "vegetables",
        (
            "broccoli",
            "spinach",
            "carrot",
            "tomato",
            "lettuce",
            "salad",
            "cucumber",
            "pepper",
            "cabbage",
            "onion",
            "vegetable",
        ),
        _template("vegetables", 30, 2.0, 6.0, 0.3),
    ),
    Rule(
        "nuts_seeds",
        (
            "almond",
            "peanut",
            "walnut",
            "cashew",
            "pistachio",
            "hazelnut",
            "seed",
            "nut",
        ),
        _template("nuts_seeds", 600, 20.0, 20.0, 50.0),
    ),
    Rule(
        "beverages",
        ("juice", "coffee", "tea", "soda", "cola", "drink"),
        _template("beverages", 40, 0.2, 10.0, 0.0),
    ),
    Rule(
        "sweets",
        ("chocolate", "cookie", "candy", "cake", "sugar", "dessert"),
        _template("sweets", 450, 5.0, 60.0, 22.0),
    ),
    # 5% protein, 60% carbs, 35% fat of 100 kcal
    Rule("default", (), _template("default", 100, 1.3, 15.0, 3.9)),
)


MEAL_SLOT_RULES: tuple[Rule[MealSlot], ...] = (
    Rule(
        "breakfast",
        (
            "breakfast",
            "cereal",
            "yogurt",
            "eggs",
            "toast",
            "pancake",
            "coffee",
            "juice",
        ),
        MealSlot.BREAKFAST,
    ),
    Rule("lunch", ("lunch", "sandwich", "soup", "salad"), MealSlot.LUNCH),
    Rule(
        "dinner",
        ("dinner", "rice", "pasta", "chicken", "beef", "fish", "pork"),
        MealSlot.DINNER,
    ),
    Rule(
        "snack",
        ("snack", "chips", "nuts", "fruit", "cookie", "candy", "chocolate"),
        MealSlot.SNACK,
    ),
    Rule("default", (), MealSlot.DINNER),
)


def estimate_facts(
    description: str, rules: Sequence[Rule[NutritionFacts]] = ESTIMATION_RULES
) -> NutritionFacts:
    """Return the estimation template for a food description."""
    return first_match(rules, description).result


def infer_meal_slot(description: str) -> MealSlot:
    """Suggest a meal slot for a food description."""
    return first_match(MEAL_SLOT_RULES, description).result
