"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from nutrition_diary.api.app import create_app
from nutrition_diary.containers import AppContainer
from tests.conftest import InMemoryDiaryRepository

DAY = "2024-05-01"


def _log_chicken(client: TestClient, size: float = 150) -> dict:
    response = client.post(
        "/diary/entries",
        json={
            "food_id": "171077",
            "meal_slot": "dinner",
            "day": DAY,
            "portion": {"size": size},
        },
    )
    return {"status": response.status_code, **response.json()}


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_search_and_detail_agree(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    search = client.get("/foods/search", params={"q": "chicken"}).json()
    detail = client.get("/foods/171077").json()

    assert search["superseded"] is False
    [hit] = search["foods"]
    assert hit["food_id"] == "171077"
    assert hit["suggested_meal_slot"] == "dinner"
    assert hit["facts"] == detail["facts"]
    assert detail["facts"]["calories_per_100g"] == 165


def test_portion_preview(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/foods/169756/portion", json={"size": 1, "unit": "cup"})

    assert response.status_code == 200
    scaled = response.json()["scaled"]
    assert scaled["weight_in_grams"] == 240
    assert scaled["calories"] == 312
    assert scaled["protein"] == 6.5


def test_invalid_portion_is_rejected(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    zero = client.post("/foods/169756/portion", json={"size": 0})
    piece = client.post("/foods/169756/portion", json={"size": 1, "unit": "piece"})

    assert zero.status_code == 422
    assert piece.status_code == 422


def test_unknown_food_returns_404(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/foods/999").status_code == 404


def test_diary_lifecycle(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    added = _log_chicken(client)
    assert added["status"] == 201
    entry_id = added["entry"]["id"]
    assert entry_id == "srv-1"
    assert added["totals"]["calories_consumed"] == 248

    day = client.get(f"/diary/{DAY}").json()
    assert day["meal_calories"]["dinner"] == 248
    assert len(day["entries"]) == 1

    edited = client.patch(
        f"/diary/entries/{entry_id}", json={"portion": {"size": 200}}
    ).json()
    assert edited["totals"]["calories_consumed"] == 330

    deleted = client.delete(f"/diary/entries/{entry_id}").json()
    assert deleted == {
        "deleted": entry_id,
        "totals": {
            "day": DAY,
            "calories_consumed": 0,
            "protein_consumed": 0.0,
            "carbs_consumed": 0.0,
            "fat_consumed": 0.0,
            "calorie_goal": 2800,
            "protein_goal": 175.0,
            "carbs_goal": 350.0,
            "fat_goal": 78.0,
            "calories_remaining": 2800,
        },
    }
    assert client.delete(f"/diary/entries/{entry_id}").status_code == 404


def test_backend_failure_keeps_entry_and_syncs_later(
    container: AppContainer, diary_repository: InMemoryDiaryRepository
) -> None:
    client = TestClient(create_app(container))
    diary_repository.fail = True

    failed = client.post(
        "/diary/entries",
        json={
            "food_id": "171077",
            "meal_slot": "lunch",
            "day": DAY,
            "portion": {"size": 100},
        },
    )

    assert failed.status_code == 502
    assert failed.json()["pending"] == 1
    assert client.get(f"/diary/{DAY}").json()["totals"]["calories_consumed"] == 165

    diary_repository.fail = False
    assert client.post("/diary/sync").json() == {"pending": 0}
    refreshed = client.get(f"/diary/{DAY}", params={"refresh": "true"}).json()
    assert [entry["id"] for entry in refreshed["entries"]] == ["srv-1"]


def test_custom_food_can_be_logged(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    created = client.post(
        "/library/custom",
        json={
            "name": "Protein bar",
            "serving_size_g": 50,
            "calories": 200,
            "protein_g": 20,
            "carbs_g": 20,
            "fat_g": 6,
        },
    )
    food_id = created.json()["food"]["food_id"]
    logged = client.post(
        "/diary/entries",
        json={
            "food_id": food_id,
            "meal_slot": "snack",
            "day": DAY,
            "portion": {"size": 1, "unit": "piece", "grams_per_unit": 50},
        },
    )

    assert created.status_code == 201
    assert logged.status_code == 201
    assert logged.json()["totals"]["calories_consumed"] == 200
    assert len(client.get("/library/custom").json()["foods"]) == 1


def test_custom_food_with_bad_serving(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/library/custom",
        json={"name": "Bad", "serving_size_g": 0, "calories": 10},
    )

    assert response.status_code == 422


def test_favorites_and_recents(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    toggled = client.post("/library/favorites", json={"food_id": "171077"}).json()
    _log_chicken(client)

    assert toggled == {"food_id": "171077", "is_favorite": True}
    favorites = client.get("/library/favorites").json()["foods"]
    assert [food["food_id"] for food in favorites] == ["171077"]
    recents = client.get("/library/recents").json()["foods"]
    assert [food["name"] for food in recents] == ["Chicken breast, roasted"]


def test_foods_for_meal(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/foods/meal/breakfast")

    assert response.status_code == 200
    assert response.json()["meal_slot"] == "breakfast"


def test_goals_and_meal_budgets(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    updated = client.put("/diary/goals", json={"calories": 2000}).json()
    _log_chicken(client)
    day = client.get(f"/diary/{DAY}").json()

    assert updated["goals"] == {
        "calories": 2000,
        "protein": 125.0,
        "carbs": 250.0,
        "fat": 56.0,
    }
    assert updated["meal_budgets"] == {
        "breakfast": 600,
        "lunch": 600,
        "dinner": 600,
        "snack": 200,
    }
    assert client.get("/diary/goals").json() == updated
    assert day["meal_budgets"]["dinner"] == 600
    assert day["totals"]["calories_remaining"] == 2000 - 248
    assert client.put("/diary/goals", json={"calories": -5}).status_code == 422


def test_clear_recents_and_delete_custom_food(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    created = client.post(
        "/library/custom",
        json={"name": "Protein bar", "serving_size_g": 50, "calories": 200},
    ).json()
    food_id = created["food"]["food_id"]
    _log_chicken(client)

    assert client.delete("/library/recents").json() == {"foods": []}
    assert client.get("/library/recents").json()["foods"] == []
    assert client.delete(f"/library/custom/{food_id}").json() == {"deleted": food_id}
    assert client.get("/library/custom").json()["foods"] == []
    assert client.delete(f"/library/custom/{food_id}").status_code == 404
