"""Domain models for favorites, recents and custom foods."""

from dataclasses import dataclass
from datetime import datetime

from nutrition_diary.domain.nutrition import NutritionFacts


@dataclass(frozen=True)
class LibraryFood:
    """A food saved to one of the user's lists."""

    food_id: str
    name: str
    facts: NutritionFacts
    is_custom: bool = False
    last_accessed_at: datetime | None = None
