"""Food lookup service integrating USDA FDC."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nutrition_diary.adapters.fdc_client import FdcClient
from nutrition_diary.domain.diary import MealSlot
from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.services.cache import Cache, food_cache_key, search_cache_key
from nutrition_diary.services.normalizer import normalize_record, parse_fdc_food

_logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

MEAL_SLOT_QUERIES: dict[MealSlot, str] = {
    MealSlot.BREAKFAST: "breakfast cereal eggs yogurt",
    MealSlot.LUNCH: "lunch sandwich salad soup",
    MealSlot.DINNER: "dinner chicken rice pasta",
    MealSlot.SNACK: "snack fruit nuts yogurt",
}

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class LookupFailure(RuntimeError):
    """Raised when the upstream lookup fails after retries."""


@dataclass
class FoodLookupService:
    """Cached food search and detail lookups.

    Every food id is normalized once per cache lifetime: search hits seed the
    detail cache, so the search list and the detail view report the same
    facts for a food.
    """

    fdc_client: FdcClient
    cache: Cache
    page_size: int = 20
    max_query_length: int = 30
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, page_size: int | None = None, page_number: int = 1
    ) -> list[NutritionFacts]:
        """Search foods, relaxing the query until something matches."""
        cleaned = clean_query(query, self.max_query_length)
        if not cleaned:
            return []
        size = page_size or self.page_size
        cache_key = search_cache_key(cleaned, size, page_number)
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        results: list[NutritionFacts] = []
        for candidate in relaxed_queries(cleaned):
            results = await self._search_once(candidate, size, page_number)
            if results:
                break
            _logger.info("No results for %r, relaxing query", candidate)

        if results:
            self.cache.set(cache_key, results)
        return results

    async def search_for_meal(
        self, meal_slot: MealSlot, page_size: int | None = None, page_number: int = 1
    ) -> list[NutritionFacts]:
        """Search foods typically eaten at a meal slot."""
        return await self.search(
            MEAL_SLOT_QUERIES[MealSlot(meal_slot)], page_size, page_number
        )

    async def get_food(self, fdc_id: str) -> NutritionFacts | None:
        """Return normalized facts for a food id, or None if unavailable."""
        cache_key = food_cache_key(str(fdc_id))
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionFacts):
            return cached

        try:
            payload = await self._call_with_retry(
                lambda: self.fdc_client.get_food(fdc_id),
                action=f"get_food:{fdc_id}",
            )
        except LookupFailure as exc:
            _logger.warning("Food lookup failed for %s: %s", fdc_id, exc)
            return None
        facts = normalize_record(parse_fdc_food(payload))
        self.cache.set(cache_key, facts)
        return facts

    async def _search_once(
        self, query: str, page_size: int, page_number: int
    ) -> list[NutritionFacts]:
        try:
            payload = await self._call_with_retry(
                lambda: self.fdc_client.search_foods(
                    query, page_size=page_size, page_number=page_number
                ),
                action=f"search:{query}",
            )
        except LookupFailure as exc:
            _logger.warning("Food search failed for %r: %s", query, exc)
            return []
        foods = payload.get("foods")
        if not isinstance(foods, list):
            return []
        results: list[NutritionFacts] = []
        for food in foods:
            if not isinstance(food, dict):
                continue
            facts = normalize_record(parse_fdc_food(food))
            results.append(self._remember(facts))
        _logger.info("Food search %r: %s results", query, len(results))
        return results

    def _remember(self, facts: NutritionFacts) -> NutritionFacts:
        if not facts.source_id:
            return facts
        cache_key = food_cache_key(facts.source_id)
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionFacts):
            return cached
        self.cache.set(cache_key, facts)
        return facts

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                attempt += 1
                _logger.debug(
                    "Lookup %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise LookupFailure(f"{action} failed") from exc
                await asyncio.sleep(self.retry_delay_seconds)


def clean_query(query: str, max_length: int = 30) -> str:
    """Trim, collapse whitespace and cap the length of a search query."""
    cleaned = _WHITESPACE.sub(" ", query.strip())
    return cleaned[:max_length].strip()


def relaxed_queries(query: str) -> list[str]:
    """Return the query followed by its trailing and first keywords."""
    words = query.split(" ")
    candidates = [query, words[-1], words[0]]
    unique: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in unique:
            unique.append(candidate)
    return unique


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
