import httpx
import openai
import pytest

from app.config import Settings
from app.schemas.document import DocumentAnalysis
from app.services.document_analysis import (
    DEMO_ANALYSES,
    AnalysisErrorKind,
    DemoDocumentAnalyzer,
    DocumentAnalysisError,
    OpenAIDocumentAnalyzer,
    create_document_analyzer,
    estimate_savings,
    pick_demo_analysis,
)


@pytest.mark.parametrize("document_type, file_name, expected", [
    ("deposition", "anything.pdf", "deposition"),
    (None, "Williams_transcript.txt", "deposition"),
    ("MSA", None, "msa"),
    (None, "master_service_agreement.docx", "msa"),
    (None, "merger_requests.pdf", "discovery"),
    (None, "mutual_nda.pdf", "nda"),
    (None, "unknown.pdf", "nda"),
    (None, None, "nda"),
])
def test_pick_demo_analysis(document_type, file_name, expected):
    assert pick_demo_analysis(document_type, file_name) == expected


def test_demo_analyses_are_valid():
    for key, raw in DEMO_ANALYSES.items():
        analysis = DocumentAnalysis.model_validate(raw)
        assert 0 <= analysis.extraction.confidence <= 1, key


@pytest.mark.asyncio
async def test_demo_analyzer_rejects_empty_upload():
    with pytest.raises(DocumentAnalysisError) as info:
        await DemoDocumentAnalyzer().analyze(b"", "x.txt")
    assert info.value.kind is AnalysisErrorKind.INVALID_INPUT
    assert info.value.status_code == 400


@pytest.mark.parametrize("kind, status", [
    (AnalysisErrorKind.RATE_LIMITED, 429),
    (AnalysisErrorKind.UNAUTHORIZED, 401),
    (AnalysisErrorKind.INVALID_INPUT, 400),
    (AnalysisErrorKind.INTERNAL, 500),
])
def test_error_kind_status(kind, status):
    assert DocumentAnalysisError(kind, "x").status_code == status


def test_estimate_savings_uses_complexity_rate():
    analysis = DocumentAnalysis.model_validate(DEMO_ANALYSES["nda"])
    analysis = analysis.model_copy(update={
        "analysis": analysis.analysis.model_copy(update={"complexity": "high", "estimated_review_time": 2.0}),
    })
    result = estimate_savings(analysis, processing_seconds=0)
    assert result.time_saved == 2.0
    assert result.cost_saved == 700.0


def test_estimate_savings_never_negative():
    analysis = DocumentAnalysis.model_validate(DEMO_ANALYSES["nda"])
    analysis = analysis.model_copy(update={
        "analysis": analysis.analysis.model_copy(update={"estimated_review_time": 0.0}),
    })
    result = estimate_savings(analysis, processing_seconds=30)
    assert result.time_saved == 0.0
    assert result.cost_saved == 0.0


def _api_error(cls, status):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return cls("upstream said no", response=httpx.Response(status, request=request), body=None)


@pytest.mark.parametrize("exc, kind", [
    (_api_error(openai.RateLimitError, 429), AnalysisErrorKind.RATE_LIMITED),
    (_api_error(openai.AuthenticationError, 401), AnalysisErrorKind.UNAUTHORIZED),
    (_api_error(openai.BadRequestError, 400), AnalysisErrorKind.INVALID_INPUT),
    (RuntimeError("boom"), AnalysisErrorKind.INTERNAL),
])
def test_openai_errors_are_classified(exc, kind):
    assert OpenAIDocumentAnalyzer._classify(exc).kind is kind


def test_factory():
    assert isinstance(create_document_analyzer(Settings(_env_file=None)), DemoDocumentAnalyzer)
    with pytest.raises(ValueError):
        create_document_analyzer(Settings(_env_file=None, DOCUMENT_ANALYZER="oracle"))
    with pytest.raises(ValueError):
        create_document_analyzer(Settings(_env_file=None, DOCUMENT_ANALYZER="openai", OPENAI_API_KEY=""))
