"""Latest-query-wins coordination for interactive food search."""

import asyncio
import logging

from nutrition_diary.domain.nutrition import NutritionFacts
from nutrition_diary.services.lookup import FoodLookupService

_logger = logging.getLogger(__name__)


class SearchCoordinator:
    """Runs searches so only the most recently issued one is published.

    Each call takes a sequence token. Starting a search cancels the previous
    one if it is still in flight, and a result whose token is no longer the
    newest is dropped even if it arrives last.
    """

    def __init__(self, lookup_service: FoodLookupService) -> None:
        self.lookup_service = lookup_service
        self.latest_query: str | None = None
        self.latest_results: list[NutritionFacts] = []
        self.published_token = 0
        self._sequence = 0
        self._task: asyncio.Task[list[NutritionFacts]] | None = None

    async def search(
        self, query: str, page_number: int = 1
    ) -> list[NutritionFacts] | None:
        """Run a search; return its results, or None if it was superseded."""
        self._sequence += 1
        token = self._sequence
        if self._task is not None and not self._task.done():
            self._task.cancel()
        task = asyncio.create_task(
            self.lookup_service.search(query, page_number=page_number)
        )
        self._task = task
        try:
            results = await task
        except asyncio.CancelledError:
            if task.cancelled() and token != self._sequence:
                _logger.debug("Search %r superseded (token %s)", query, token)
                return None
            raise
        if token != self._sequence:
            _logger.debug("Dropping stale results for %r (token %s)", query, token)
            return None
        self.latest_query = query
        self.latest_results = results
        self.published_token = token
        return results
