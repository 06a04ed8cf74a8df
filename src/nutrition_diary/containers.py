"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_diary.adapters.fdc_client import HttpxFdcClient
from nutrition_diary.adapters.supabase_diary_repository import SupabaseDiaryRepository
from nutrition_diary.adapters.supabase_library_repository import (
    SupabaseLibraryRepository,
)
from nutrition_diary.config import Settings
from nutrition_diary.domain.diary import NutritionGoals
from nutrition_diary.services.cache import LookupCache
from nutrition_diary.services.diary import DiaryAggregator
from nutrition_diary.services.library import FoodLibraryService
from nutrition_diary.services.lookup import FoodLookupService
from nutrition_diary.services.search import SearchCoordinator
from nutrition_diary.services.sync import DiarySyncService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    lookup_service: FoodLookupService
    search_coordinator: SearchCoordinator
    library_service: FoodLibraryService
    diary: DiaryAggregator
    diary_sync: DiarySyncService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    diary_repository = SupabaseDiaryRepository(
        supabase_client, resolved_settings.diary_user_id
    )
    library_repository = SupabaseLibraryRepository(
        supabase_client, resolved_settings.diary_user_id
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        data_types=resolved_settings.fdc_data_types,
    )
    lookup_service = FoodLookupService(
        fdc_client=fdc_client,
        cache=LookupCache(ttl_seconds=resolved_settings.lookup_cache_ttl_seconds),
        page_size=resolved_settings.search_page_size,
        max_query_length=resolved_settings.max_query_length,
        retry_attempts=resolved_settings.lookup_retry_attempts,
        retry_delay_seconds=resolved_settings.lookup_retry_delay_seconds,
    )
    library_service = FoodLibraryService(
        library_repository, recent_limit=resolved_settings.recent_foods_limit
    )
    diary = DiaryAggregator(
        goals=NutritionGoals.from_calories(resolved_settings.daily_calorie_goal)
    )
    diary_sync = DiarySyncService(
        aggregator=diary,
        repository=diary_repository,
        library_service=library_service,
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        lookup_service=lookup_service,
        search_coordinator=SearchCoordinator(lookup_service),
        library_service=library_service,
        diary=diary,
        diary_sync=diary_sync,
        close_resources=close_resources,
    )
