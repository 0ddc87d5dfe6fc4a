"""Document processing API route."""
import hashlib
import logging
import math
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import (
    get_analysis_cache,
    get_document_analyzer,
    get_rate_limiter,
    get_settings,
)
from app.schemas.common import ErrorResponse
from app.schemas.document import DocumentAnalysis, ProcessDocumentResponse
from app.services import workflow_metrics as metrics_service
from app.services.document_analysis import DocumentAnalysisError, DocumentAnalyzer
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.request_cache import RequestCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/process-document", tags=["documents"])

WORKFLOW_NAME = "Document Processing"


def _client_id(request: Request, trust_proxy: bool = False) -> str:
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.post(
    "",
    response_model=ProcessDocumentResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 413, 429, 500)},
)
async def process_document(
    request: Request,
    file: Optional[UploadFile] = File(None),
    document_type: Optional[str] = Form(None, alias="documentType"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
    cache: RequestCache = Depends(get_analysis_cache),
    analyzer: DocumentAnalyzer = Depends(get_document_analyzer),
):
    """Analyze an uploaded document and record the run as a workflow metric."""
    client_id = _client_id(request, settings.TRUST_PROXY_HEADERS)
    if not limiter.is_allowed(client_id):
        retry_after = math.ceil(limiter.reset_after(client_id))
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after), "X-RateLimit-Remaining": "0"},
        )
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    if file.size is not None and file.size > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    file_name = file.filename or "document"

    cache_key = hashlib.sha256(content + b"\0" + (document_type or "").encode()).hexdigest()
    cached = cache.get(cache_key)

    started = time.monotonic()
    if cached is not None:
        analysis: DocumentAnalysis = cached
    else:
        try:
            analysis = await analyzer.analyze(content, file_name, document_type)
        except DocumentAnalysisError as e:
            logger.warning("Document analysis failed (%s): %s", e.kind.value, e.message)
            await metrics_service.record_metric(
                db,
                workflow_name=WORKFLOW_NAME,
                execution_time=time.monotonic() - started,
                success=False,
                model_used=analyzer.model_name,
                error_message=e.message,
            )
            raise
        cache.set(cache_key, analysis)
    processing_time = time.monotonic() - started

    metric = await metrics_service.record_metric(
        db,
        workflow_name=WORKFLOW_NAME,
        execution_time=processing_time,
        success=True,
        model_used=analyzer.model_name,
    )

    now = datetime.now(timezone.utc)
    return {
        "success": True,
        "analysis": {
            **analysis.model_dump(),
            "metadata": {
                "processing_time": processing_time,
                "file_name": file_name,
                "file_size": len(content),
                "document_type": document_type or analysis.extraction.document_type,
                "analyzer": analyzer.name,
                "cached": cached is not None,
                "timestamp": now,
            },
        },
        "metrics": {
            "file_name": file_name,
            "file_size": len(content),
            "document_type": analysis.extraction.document_type,
            "processing_time": processing_time,
            "time_saved": analysis.time_saved,
            "cost_saved": analysis.cost_saved,
            "confidence": analysis.extraction.confidence,
            "workflow_id": metric.workflow_id,
            "timestamp": now,
        },
        "message": f"Document processed successfully in {processing_time:.1f}s",
    }
