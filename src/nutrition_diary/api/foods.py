"""Food lookup, portion preview and food list endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from nutrition_diary.api.models import (
    CustomFoodPayload,
    FavoritePayload,
    PortionPayload,
)
from nutrition_diary.domain.diary import FoodRef, MealSlot
from nutrition_diary.services.rules import infer_meal_slot
from nutrition_diary.services.scaling import scale

if TYPE_CHECKING:
    from nutrition_diary.containers import AppContainer
    from nutrition_diary.domain.nutrition import NutritionFacts

router = APIRouter(tags=["foods"])


@router.get("/foods/search")
async def search_foods(request: Request, q: str, page: int = 1) -> dict[str, object]:
    """Search foods and suggest a meal slot for each hit.

    A search overtaken by a newer one returns ``superseded`` with no foods.
    """
    container: AppContainer = request.app.state.container
    results = await container.search_coordinator.search(q, page_number=page)
    if results is None:
        return {"query": q, "page": page, "superseded": True, "foods": []}
    foods = [_food_view(facts) for facts in results]
    return {"query": q, "page": page, "superseded": False, "foods": foods}


@router.get("/foods/meal/{meal_slot}")
async def foods_for_meal(request: Request, meal_slot: MealSlot) -> dict[str, object]:
    """Return foods typically eaten at a meal slot."""
    container: AppContainer = request.app.state.container
    results = await container.lookup_service.search_for_meal(meal_slot)
    foods = [_food_view(facts) for facts in results]
    return {"meal_slot": meal_slot, "foods": foods}


@router.get("/foods/{food_id}")
async def food_detail(request: Request, food_id: str) -> dict[str, object]:
    """Return normalized facts for one food."""
    container: AppContainer = request.app.state.container
    food = await resolve_food(container, food_id)
    return _food_view(food.facts)


@router.post("/foods/{food_id}/portion")
async def preview_portion(
    request: Request, food_id: str, portion: PortionPayload
) -> dict[str, object]:
    """Scale a food to a portion without logging it."""
    container: AppContainer = request.app.state.container
    food = await resolve_food(container, food_id)
    return {"food_id": food.food_id, "scaled": scale(food.facts, portion.to_spec())}


@router.get("/library/favorites")
async def list_favorites(request: Request) -> dict[str, object]:
    """Return favorite foods."""
    container: AppContainer = request.app.state.container
    return {"foods": await container.library_service.favorites()}


@router.post("/library/favorites")
async def toggle_favorite(
    request: Request, payload: FavoritePayload
) -> dict[str, object]:
    """Toggle a food's favorite status."""
    container: AppContainer = request.app.state.container
    food = await resolve_food(container, payload.food_id)
    is_favorite = await container.library_service.toggle_favorite(food)
    return {"food_id": food.food_id, "is_favorite": is_favorite}


@router.get("/library/recents")
async def list_recents(
    request: Request, limit: int | None = None
) -> dict[str, object]:
    """Return recently logged foods."""
    container: AppContainer = request.app.state.container
    return {"foods": await container.library_service.recents(limit)}


@router.delete("/library/recents")
async def clear_recents(request: Request) -> dict[str, object]:
    """Forget all recently logged foods."""
    container: AppContainer = request.app.state.container
    await container.library_service.clear_recents()
    return {"foods": []}


@router.get("/library/custom")
async def list_custom_foods(request: Request) -> dict[str, object]:
    """Return user-created foods."""
    container: AppContainer = request.app.state.container
    return {"foods": await container.library_service.custom_foods()}


@router.post("/library/custom", status_code=status.HTTP_201_CREATED)
async def create_custom_food(
    request: Request, payload: CustomFoodPayload
) -> dict[str, object]:
    """Create a custom food from per-serving label values."""
    container: AppContainer = request.app.state.container
    try:
        food = await container.library_service.create_custom_food(
            name=payload.name,
            serving_size_g=payload.serving_size_g,
            calories=payload.calories,
            protein_g=payload.protein_g,
            carbs_g=payload.carbs_g,
            fat_g=payload.fat_g,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {"food": food}


@router.delete("/library/custom/{food_id}")
async def delete_custom_food(request: Request, food_id: str) -> dict[str, object]:
    """Delete a user-created food."""
    container: AppContainer = request.app.state.container
    if not await container.library_service.delete_custom_food(food_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Food not found"
        )
    return {"deleted": food_id}


async def resolve_food(container: AppContainer, food_id: str) -> FoodRef:
    """Resolve a food id to a reference with per-100g facts."""
    if food_id.startswith("custom-"):
        for food in await container.library_service.custom_foods():
            if food.food_id == food_id:
                return FoodRef(food_id=food.food_id, name=food.name, facts=food.facts)
    else:
        facts = await container.lookup_service.get_food(food_id)
        if facts is not None:
            return FoodRef(food_id=food_id, name=facts.source_label, facts=facts)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Food not found")


def _food_view(facts: NutritionFacts) -> dict[str, object]:
    return {
        "food_id": facts.source_id,
        "name": facts.source_label,
        "facts": facts,
        "suggested_meal_slot": infer_meal_slot(facts.source_label),
    }
