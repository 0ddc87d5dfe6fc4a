from datetime import datetime

import pytest

from conftest import create_prompt, ingest


def test_create_use_and_get_prompt(client):
    created = create_prompt(client)
    assert isinstance(created["id"], int)
    assert created["performance_score"] == 0.5
    assert created["usage_count"] == 0

    used = client.post(f"/api/prompts/{created['id']}/use")
    assert used.status_code == 200
    assert used.json()["usage_count"] == 1

    fetched = client.get(f"/api/prompts/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["usage_count"] == 1
    assert fetched.json()["name"] == "Test"


def test_create_prompt_keeps_supplied_score(client):
    created = create_prompt(client, performance_score=0.8)
    assert client.get(f"/api/prompts/{created['id']}").json()["performance_score"] == 0.8


def test_zero_score_falls_back_to_default(client):
    created = create_prompt(client, performance_score=0)
    assert created["performance_score"] == 0.5


@pytest.mark.parametrize("missing", ["name", "model", "template"])
def test_create_prompt_requires_fields(client, missing):
    body = {"name": "Test", "model": "gpt-4", "template": "Do X"}
    del body[missing]
    response = client.post("/api/prompts", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Name, model, and template are required"}


def test_create_prompt_rejects_blank_fields(client):
    response = client.post("/api/prompts", json={"name": "  ", "model": "gpt-4", "template": "Do X"})
    assert response.status_code == 400
    assert client.get("/api/prompts").json() == []


def test_list_prompts_best_score_first(client):
    create_prompt(client, name="low", performance_score=0.2)
    create_prompt(client, name="high", performance_score=0.9)
    create_prompt(client, name="mid", performance_score=0.6)

    names = [p["name"] for p in client.get("/api/prompts").json()]
    assert names == ["high", "mid", "low"]


def test_list_prompts_empty(client):
    response = client.get("/api/prompts")
    assert response.status_code == 200
    assert response.json() == []


def test_partial_update_leaves_other_fields(client):
    created = create_prompt(client, performance_score=0.7)

    response = client.put(f"/api/prompts/{created['id']}", json={"name": "Renamed"})
    assert response.status_code == 200
    updated = response.json()

    assert updated["name"] == "Renamed"
    for field in ("model", "template", "performance_score", "usage_count", "created_at"):
        assert updated[field] == created[field]
    assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(created["updated_at"])


def test_update_with_null_does_not_overwrite(client):
    created = create_prompt(client)
    response = client.put(f"/api/prompts/{created['id']}", json={"template": None, "model": "claude-3-opus"})
    assert response.status_code == 200
    assert response.json()["template"] == "Do X"
    assert response.json()["model"] == "claude-3-opus"


@pytest.mark.parametrize("body", [{"name": ""}, {"name": "   "}, {"model": ""}, {"template": " \t"}])
def test_update_rejects_blank_text(client, body):
    created = create_prompt(client)
    response = client.put(f"/api/prompts/{created['id']}", json=body)
    assert response.status_code == 400
    field = next(iter(body))
    assert response.json() == {"error": f"{field.capitalize()} cannot be blank"}
    assert client.get(f"/api/prompts/{created['id']}").json()[field] == created[field]


def test_update_missing_prompt(client):
    response = client.put("/api/prompts/999", json={"name": "x"})
    assert response.status_code == 404
    assert response.json() == {"error": "Prompt not found"}


def test_delete_prompt(client):
    created = create_prompt(client)

    response = client.delete(f"/api/prompts/{created['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Prompt deleted successfully"

    assert client.get(f"/api/prompts/{created['id']}").status_code == 404
    assert client.delete(f"/api/prompts/{created['id']}").status_code == 404


def test_delete_keeps_metrics_referencing_prompt(client):
    created = create_prompt(client)
    ingest(client, prompt_id=created["id"])
    client.delete(f"/api/prompts/{created['id']}")

    rows = client.get("/api/workflow-metrics").json()
    assert len(rows) == 1
    assert rows[0]["prompt_id"] == created["id"]
    assert rows[0]["prompt_name"] is None


def test_use_counts_every_call(client):
    created = create_prompt(client)
    for _ in range(3):
        client.post(f"/api/prompts/{created['id']}/use")
    assert client.get(f"/api/prompts/{created['id']}").json()["usage_count"] == 3


def test_use_and_update_score_on_missing_prompt_return_404(client):
    # Unknown ids are reported instead of silently succeeding
    assert client.post("/api/prompts/424242/use").status_code == 404
    assert client.post("/api/prompts/424242/update-score").status_code == 404


def test_update_score_without_executions_is_null(client):
    created = create_prompt(client)

    response = client.post(f"/api/prompts/{created['id']}/update-score")
    assert response.status_code == 200
    assert response.json()["performance_score"] is None
    assert response.json()["executions"] == 0
    assert client.get(f"/api/prompts/{created['id']}").json()["performance_score"] is None


def test_update_score_is_success_rate(client):
    created = create_prompt(client)
    ingest(client, prompt_id=created["id"], success=True)
    ingest(client, prompt_id=created["id"], success=True)
    ingest(client, prompt_id=created["id"], success=False, error_message="timeout")
    ingest(client, success=False)  # other prompt, ignored

    response = client.post(f"/api/prompts/{created['id']}/update-score")
    assert response.json()["performance_score"] == pytest.approx(2 / 3)
    assert response.json()["executions"] == 3


def test_malformed_id_is_client_error(client):
    response = client.get("/api/prompts/not-a-number")
    assert response.status_code == 400
    assert "error" in response.json()
