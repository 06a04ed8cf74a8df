"""Diary endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from nutrition_diary.api.foods import resolve_food
from nutrition_diary.api.models import (
    AddEntryPayload,
    CalorieGoalPayload,
    EditPortionPayload,
)

if TYPE_CHECKING:
    from nutrition_diary.containers import AppContainer

router = APIRouter(prefix="/diary", tags=["diary"])


@router.get("/goals")
async def get_goals(request: Request) -> dict:
    """Return daily goals and per-meal calorie budgets."""
    container: AppContainer = request.app.state.container
    return {
        "goals": container.diary.goals,
        "meal_budgets": container.diary.meal_budgets(),
    }


@router.put("/goals")
async def set_calorie_goal(request: Request, payload: CalorieGoalPayload) -> dict:
    """Change the daily calorie goal; macro goals follow from it."""
    container: AppContainer = request.app.state.container
    goals = container.diary.set_calorie_goal(payload.calories)
    return {"goals": goals, "meal_budgets": container.diary.meal_budgets()}


@router.get("/{day}")
async def diary_day(request: Request, day: date, refresh: bool = False) -> dict:
    """Return a day's entries, per-meal calories and totals."""
    container: AppContainer = request.app.state.container
    if refresh:
        await container.diary_sync.load_day(day)
    return {
        "day": day,
        "entries": container.diary.entries_for(day),
        "meal_calories": container.diary.meal_calories(day),
        "meal_budgets": container.diary.meal_budgets(),
        "totals": container.diary.totals_for(day),
    }


@router.post("/entries", status_code=status.HTTP_201_CREATED)
async def add_entry(request: Request, payload: AddEntryPayload) -> dict:
    """Log a food portion."""
    container: AppContainer = request.app.state.container
    food = await resolve_food(container, payload.food_id)
    entry = await container.diary_sync.add_entry(
        food, payload.portion.to_spec(), payload.meal_slot, payload.day
    )
    return {"entry": entry, "totals": container.diary.totals_for(payload.day)}


@router.patch("/entries/{entry_id}")
async def edit_entry(
    request: Request, entry_id: str, payload: EditPortionPayload
) -> dict:
    """Change an entry's portion."""
    container: AppContainer = request.app.state.container
    entry = await container.diary_sync.edit_portion(
        entry_id, payload.portion.to_spec()
    )
    return {"entry": entry, "totals": container.diary.totals_for(entry.entry_date)}


@router.delete("/entries/{entry_id}")
async def delete_entry(request: Request, entry_id: str) -> dict:
    """Delete an entry."""
    container: AppContainer = request.app.state.container
    entry = await container.diary_sync.delete_entry(entry_id)
    return {"deleted": entry.id, "totals": container.diary.totals_for(entry.entry_date)}


@router.post("/sync")
async def retry_pending(request: Request) -> dict[str, int]:
    """Replay diary writes that previously failed."""
    container: AppContainer = request.app.state.container
    return {"pending": await container.diary_sync.retry_pending()}
