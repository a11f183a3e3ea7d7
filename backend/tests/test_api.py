def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_recipe_cost(client):
    response = client.post(
        "/api/recipes/cost",
        json={
            "ingredients": [
                {"name": "onion", "amount": 1},
                {"name": "olive oil", "amount": 2, "unit": "tbsp"},
            ],
            "servings": 2,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_cost"] == 1.38
    assert data["cost_per_serving"] == 0.69
    assert data["confidence"] == "high"
    assert [i["original"] for i in data["items"]] == ["1 onion", "2 tbsp olive oil"]
    assert data["items"][0]["match_reason"] == "exact"
    assert data["rejected"] == []


def test_recipe_cost_lists_rejected_entries(client):
    response = client.post(
        "/api/recipes/cost",
        json={"ingredients": [{"name": "onion", "amount": 1}, {"name": "salt", "amount": 0}, "pinch of love"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 1
    assert [r["index"] for r in data["rejected"]] == [1, 2]
    assert data["rejected"][1]["original"] == "pinch of love"


def test_recipe_cost_requires_ingredients(client):
    response = client.post("/api/recipes/cost", json={"servings": 2})
    assert response.status_code == 422


def test_recipe_cost_rejects_non_list_ingredients(client):
    response = client.post("/api/recipes/cost", json={"ingredients": "onion"})
    assert response.status_code == 422


def test_providers_listing(client):
    response = client.get("/api/providers")
    assert response.status_code == 200
    assert response.json() == []
