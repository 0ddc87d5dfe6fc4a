"""Shared fixtures: a fresh SQLite file per test."""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Database
from app.main import create_app


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'metrics.db'}",
        DOCUMENT_ANALYZER="demo",
        RATE_LIMIT_MAX_REQUESTS=5,
        SEED_ON_STARTUP=False,
        METRICS_RETENTION_DAYS=0,
    )


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture()
async def database(tmp_path):
    async with Database(f"sqlite+aiosqlite:///{tmp_path / 'service.db'}") as db:
        await db.init_schema()
        yield db


@pytest_asyncio.fixture()
async def session(database):
    async with database.session() as s:
        yield s


def create_prompt(client, **overrides):
    body = {"name": "Test", "model": "gpt-4", "template": "Do X", **overrides}
    response = client.post("/api/prompts", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def ingest(client, **overrides):
    body = {
        "workflow_name": "t",
        "execution_time": 10,
        "success": True,
        "model_used": "gpt-4",
        "tokens_used": 100,
        "cost": 0.01,
        **overrides,
    }
    response = client.post("/api/workflow-metrics", json=body)
    assert response.status_code == 200, response.text
    return response.json()
