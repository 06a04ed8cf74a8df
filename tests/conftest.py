"""Shared test fixtures."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date

import pytest

from nutrition_diary.adapters.fdc_client import FdcClient
from nutrition_diary.config import Settings
from nutrition_diary.containers import AppContainer
from nutrition_diary.domain.diary import DiaryEntry, FoodRef
from nutrition_diary.domain.library import LibraryFood
from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.services.cache import LookupCache
from nutrition_diary.services.diary import DiaryAggregator
from nutrition_diary.services.library import FoodLibraryService, LibraryRepository
from nutrition_diary.services.lookup import FoodLookupService
from nutrition_diary.services.search import SearchCoordinator
from nutrition_diary.services.sync import DiaryRepository, DiarySyncService


def fdc_nutrient(
    nutrient_id: int, number: str, name: str, unit: str, value: float
) -> dict[str, object]:
    """Build a search-style FDC nutrient item."""
    return {
        "nutrientId": nutrient_id,
        "nutrientNumber": number,
        "nutrientName": name,
        "unitName": unit,
        "value": value,
    }


def fdc_food(  # noqa: PLR0913
    fdc_id: int,
    description: str,
    calories: float | None,
    protein: float | None,
    carbs: float | None,
    fat: float | None,
    serving_size: float | None = None,
) -> dict[str, object]:
    """Build an FDC food payload with per-100g nutrients."""
    nutrients = []
    if calories is not None:
        nutrients.append(fdc_nutrient(1008, "208", "Energy", "KCAL", calories))
    if protein is not None:
        nutrients.append(fdc_nutrient(1003, "203", "Protein", "G", protein))
    if carbs is not None:
        nutrients.append(
            fdc_nutrient(1005, "205", "Carbohydrate, by difference", "G", carbs)
        )
    if fat is not None:
        nutrients.append(fdc_nutrient(1004, "204", "Total lipid (fat)", "G", fat))
    payload: dict[str, object] = {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "Branded",
        "foodNutrients": nutrients,
    }
    if serving_size is not None:
        payload["servingSize"] = serving_size
        payload["servingSizeUnit"] = "g"
    return payload


CHICKEN = fdc_food(171077, "Chicken breast, roasted", 165, 31.0, 0.0, 3.6)
RICE = fdc_food(169756, "Rice, white, cooked", 130, 2.7, 28.2, 0.3, serving_size=158)


def make_facts(  # noqa: PLR0913
    calories: float = 150,
    protein: float = 10.0,
    carbs: float = 20.0,
    fat: float = 5.0,
    source_id: str = "111",
    label: str = "Test food",
    serving_size_g: float | None = None,
) -> NutritionFacts:
    """Build per-100g facts for tests."""
    return NutritionFacts(
        calories_per_100g=calories,
        protein_per_100g=protein,
        carbs_per_100g=carbs,
        fat_per_100g=fat,
        source_id=source_id,
        source_label=label,
        serving_size_g=serving_size_g,
    )


def make_food(facts: NutritionFacts | None = None) -> FoodRef:
    """Build a food reference for tests."""
    resolved = facts or make_facts()
    return FoodRef(
        food_id=resolved.source_id, name=resolved.source_label, facts=resolved
    )


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    foods: list[dict[str, object]] = field(default_factory=lambda: [CHICKEN, RICE])
    search_calls: list[str] = field(default_factory=list)
    food_calls: list[str] = field(default_factory=list)
    fail: bool = False

    async def search_foods(
        self, query: str, page_size: int = 20, page_number: int = 1
    ) -> dict[str, object]:
        self.search_calls.append(query)
        if self.fail:
            raise RuntimeError("FDC unavailable")
        words = query.lower().split()
        hits = [
            food
            for food in self.foods
            if all(word in str(food["description"]).lower() for word in words)
        ]
        start = (page_number - 1) * page_size
        return {"foods": hits[start : start + page_size]}

    async def get_food(self, fdc_id: str) -> dict[str, object]:
        self.food_calls.append(fdc_id)
        if self.fail:
            raise RuntimeError("FDC unavailable")
        for food in self.foods:
            if str(food["fdcId"]) == str(fdc_id):
                return food
        raise RuntimeError(f"FDC food {fdc_id} not found")


@dataclass
class InMemoryDiaryRepository(DiaryRepository):
    """In-memory diary backend that assigns server ids."""

    entries: dict[str, DiaryEntry] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    calorie_adjustment: int = 0
    fail: bool = False
    _next_id: int = 0

    async def create_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        self._check()
        self._next_id += 1
        stored = replace(
            entry,
            id=f"srv-{self._next_id}",
            scaled=replace(
                entry.scaled, calories=entry.scaled.calories + self.calorie_adjustment
            ),
            synced=True,
        )
        self.entries[stored.id] = stored
        return stored

    async def update_diary_entry(self, entry: DiaryEntry) -> DiaryEntry:
        self._check()
        if entry.id not in self.entries:
            raise RuntimeError(f"Unknown entry {entry.id}")
        stored = replace(entry, synced=True)
        self.entries[stored.id] = stored
        return stored

    async def delete_diary_entry(self, entry_id: str) -> None:
        self._check()
        self.entries.pop(entry_id, None)
        self.deleted.append(entry_id)

    async def list_diary_entries(self, day: date) -> list[DiaryEntry]:
        self._check()
        return [entry for entry in self.entries.values() if entry.entry_date == day]

    def _check(self) -> None:
        if self.fail:
            raise RuntimeError("backend unavailable")


@dataclass
class InMemoryLibraryRepository(LibraryRepository):
    """In-memory food lists for tests."""

    favorite_foods: list[LibraryFood] = field(default_factory=list)
    recent_foods: list[LibraryFood] = field(default_factory=list)
    custom: list[LibraryFood] = field(default_factory=list)
    fail: bool = False

    async def list_favorites(self) -> list[LibraryFood]:
        return list(self.favorite_foods)

    async def add_favorite(self, food: LibraryFood) -> LibraryFood:
        self.favorite_foods.append(food)
        return food

    async def remove_favorite(self, food_id: str) -> None:
        self.favorite_foods = [
            food for food in self.favorite_foods if food.food_id != food_id
        ]

    async def list_recent_foods(self, limit: int) -> list[LibraryFood]:
        return self.recent_foods[:limit]

    async def touch_recent_food(self, food: LibraryFood) -> LibraryFood:
        if self.fail:
            raise RuntimeError("backend unavailable")
        self.recent_foods = [
            item for item in self.recent_foods if item.food_id != food.food_id
        ]
        self.recent_foods.append(food)
        return food

    async def clear_recent_foods(self) -> None:
        self.recent_foods = []

    async def list_custom_foods(self) -> list[LibraryFood]:
        return list(self.custom)

    async def add_custom_food(self, food: LibraryFood) -> LibraryFood:
        self.custom.append(food)
        return food

    async def delete_custom_food(self, food_id: str) -> None:
        self.custom = [food for food in self.custom if food.food_id != food_id]


@pytest.fixture
def app_caplog(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> pytest.LogCaptureFixture:
    """Capture app logs even after configure_logging disabled propagation."""
    monkeypatch.setattr(logging.getLogger("nutrition_diary"), "propagate", True)
    return caplog


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        diary_user_id="user-1",
        fdc_api_key="fdc-key",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def diary_repository() -> InMemoryDiaryRepository:
    return InMemoryDiaryRepository()


@pytest.fixture
def library_repository() -> InMemoryLibraryRepository:
    return InMemoryLibraryRepository()


@pytest.fixture
def lookup_service(fdc_client: FakeFdcClient) -> FoodLookupService:
    return FoodLookupService(
        fdc_client=fdc_client, cache=LookupCache(), retry_delay_seconds=0
    )


@pytest.fixture
def container(
    settings: Settings,
    lookup_service: FoodLookupService,
    diary_repository: InMemoryDiaryRepository,
    library_repository: InMemoryLibraryRepository,
) -> AppContainer:
    library_service = FoodLibraryService(library_repository)
    diary = DiaryAggregator()
    diary_sync = DiarySyncService(
        aggregator=diary,
        repository=diary_repository,
        library_service=library_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        lookup_service=lookup_service,
        search_coordinator=SearchCoordinator(lookup_service),
        library_service=library_service,
        diary=diary,
        diary_sync=diary_sync,
        close_resources=close_resources,
    )
