"""FastAPI dependencies for objects owned by the running application.

Everything here is created once in ``create_app`` and stored on
``app.state``; handlers receive it through ``Depends``.
"""
from fastapi import Request

from app.config import Settings
from app.services.document_analysis import DocumentAnalyzer
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.request_cache import RequestCache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.rate_limiter


def get_analysis_cache(request: Request) -> RequestCache:
    return request.app.state.analysis_cache


def get_document_analyzer(request: Request) -> DocumentAnalyzer:
    return request.app.state.document_analyzer
