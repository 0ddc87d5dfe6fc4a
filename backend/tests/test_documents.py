import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.document_analysis import (
    AnalysisErrorKind,
    DocumentAnalysisError,
    DocumentAnalyzer,
)


class FailingAnalyzer(DocumentAnalyzer):
    name = "failing"
    model_name = "stub-model"

    def __init__(self, kind):
        self.kind = kind

    async def analyze(self, content, file_name, document_type=None):
        raise DocumentAnalysisError(self.kind, f"{self.kind.value} from upstream")


def _upload(client, name="contract.txt", content=b"This Agreement is made...", document_type=None):
    data = {"documentType": document_type} if document_type else None
    return client.post(
        "/api/process-document",
        files={"file": (name, content, "text/plain")},
        data=data,
    )


def test_process_document_returns_analysis_and_records_metric(client):
    response = _upload(client, name="mutual_nda.txt")
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert body["analysis"]["extraction"]["document_type"] == "Non-Disclosure Agreement"
    assert body["analysis"]["risks"][0]["severity"] in {"low", "medium", "high", "critical"}
    assert body["analysis"]["metadata"]["file_name"] == "mutual_nda.txt"
    assert body["metrics"]["time_saved"] == 7.8

    rows = client.get("/api/workflow-metrics").json()
    assert len(rows) == 1
    assert rows[0]["workflow_name"] == "Document Processing"
    assert rows[0]["success"] is True
    assert rows[0]["workflow_id"] == body["metrics"]["workflow_id"]


def test_type_hint_selects_analysis(client):
    response = _upload(client, document_type="deposition")
    assert response.json()["analysis"]["extraction"]["document_type"] == "Deposition Transcript"


def test_repeat_upload_is_served_from_cache(client):
    first = _upload(client).json()
    second = _upload(client).json()
    assert first["analysis"]["metadata"]["cached"] is False
    assert second["analysis"]["metadata"]["cached"] is True


def test_missing_file(client):
    response = client.post("/api/process-document", data={"documentType": "nda"})
    assert response.status_code == 400
    assert response.json() == {"error": "No file provided"}


def test_empty_file_is_invalid_input(client):
    response = _upload(client, content=b"")
    assert response.status_code == 400


def test_rate_limit_per_client(client):
    # conftest allows 5 requests per window
    for _ in range(5):
        assert _upload(client).status_code == 200
    response = _upload(client)
    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded"}



def test_rate_limit_ignores_forwarded_header_by_default(client):
    statuses = [
        client.post(
            "/api/process-document",
            files={"file": ("contract.txt", b"text", "text/plain")},
            headers={"x-forwarded-for": f"10.0.0.{i}"},
        ).status_code
        for i in range(8)
    ]
    assert statuses == [200] * 5 + [429] * 3


def test_rate_limited_response_carries_retry_after(client):
    for _ in range(5):
        _upload(client)
    response = _upload(client)
    assert response.status_code == 429
    assert 0 < int(response.headers["retry-after"]) <= 60
    assert response.headers["x-ratelimit-remaining"] == "0"


def test_forwarded_header_is_used_behind_trusted_proxy(settings):
    app = create_app(settings.model_copy(update={"TRUST_PROXY_HEADERS": True}))
    with TestClient(app) as trusted:
        for i in range(8):
            response = trusted.post(
                "/api/process-document",
                files={"file": ("contract.txt", b"text", "text/plain")},
                headers={"x-forwarded-for": f"10.0.0.{i}, 172.16.0.1"},
            )
            assert response.status_code == 200


def test_oversized_upload_is_rejected(settings):
    app = create_app(settings.model_copy(update={"MAX_UPLOAD_BYTES": 16}))
    with TestClient(app) as small:
        assert _upload(small, content=b"x" * 16).status_code == 200
        response = _upload(small, content=b"x" * 17)
    assert response.status_code == 413
    assert response.json() == {"error": "File too large"}


@pytest.mark.parametrize("kind, status", [
    (AnalysisErrorKind.RATE_LIMITED, 429),
    (AnalysisErrorKind.UNAUTHORIZED, 401),
    (AnalysisErrorKind.INVALID_INPUT, 400),
    (AnalysisErrorKind.INTERNAL, 500),
])
def test_analysis_errors_map_to_status(client, kind, status):
    client.app.state.document_analyzer = FailingAnalyzer(kind)

    response = _upload(client)
    assert response.status_code == status
    assert response.json() == {"error": f"{kind.value} from upstream"}

    row = client.get("/api/workflow-metrics").json()[0]
    assert row["success"] is False
    assert row["model_used"] == "stub-model"
    assert row["error_message"] == f"{kind.value} from upstream"


def test_error_statuses_are_documented(client):
    responses = client.get("/openapi.json").json()["paths"]["/api/process-document"]["post"]["responses"]
    assert {"400", "429", "500"} <= set(responses)
