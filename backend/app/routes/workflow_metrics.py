"""Workflow metrics API routes: ingestion, listing and dashboard aggregates."""
import logging
import time

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_settings
from app.schemas.workflow_metric import (
    WorkflowMetricCreate,
    WorkflowMetricCreated,
    WorkflowMetricResponse,
    WorkflowStats,
    ModelPerformance,
    LenientMetricCreate,
    LenientMetricCreated,
)
from app.services import workflow_metrics as metrics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflow-metrics", tags=["workflow-metrics"])
performance_router = APIRouter(prefix="/api/model-performance", tags=["workflow-metrics"])
ingest_router = APIRouter(tags=["workflow-metrics"])

LENIENT_DEFAULT_WORKFLOW_NAME = "Demo Workflow"
LENIENT_DEFAULT_MODEL = "gpt-4"
LENIENT_DEFAULT_PROMPT_ID = 1
LENIENT_DEFAULT_COST_SAVED = 450.0
LENIENT_TIME_SAVED_MULTIPLIER = 60


@router.post("", response_model=WorkflowMetricCreated)
async def create_workflow_metric(
    body: WorkflowMetricCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record one completed execution. A workflow_id is generated if absent."""
    metric = await metrics_service.record_metric(db, **body.model_dump())
    return {"id": metric.id, "workflow_id": metric.workflow_id}


@router.get("", response_model=list[WorkflowMetricResponse])
async def list_workflow_metrics(
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """List executions newest first, joined with the prompt name."""
    if limit is None:
        limit = settings.METRICS_DEFAULT_LIMIT
    limit = min(limit, settings.METRICS_MAX_LIMIT)
    return await metrics_service.list_metrics(db, limit=limit, offset=offset)


@router.get("/stats", response_model=WorkflowStats)
async def get_workflow_stats(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Rolling aggregate over the configured window (30 days by default)."""
    return await metrics_service.workflow_stats(db, window_days=settings.STATS_WINDOW_DAYS)


@performance_router.get("", response_model=list[ModelPerformance])
async def get_model_performance(db: AsyncSession = Depends(get_db)):
    """Per-model success rate, latency, tokens and cost over all time."""
    return await metrics_service.model_performance(db)


@ingest_router.post("/metrics", response_model=LenientMetricCreated)
@ingest_router.post("/api/metrics", response_model=LenientMetricCreated)
async def ingest_metrics_lenient(
    body: LenientMetricCreate,
    db: AsyncSession = Depends(get_db),
):
    """Compatibility ingestion for workflow tools: missing fields get demo defaults."""
    execution_time = body.execution_time or 0
    metric = await metrics_service.record_metric(
        db,
        workflow_id=body.workflow_id or f"demo-{int(time.time() * 1000)}",
        workflow_name=body.workflow_name or LENIENT_DEFAULT_WORKFLOW_NAME,
        execution_time=execution_time,
        success=body.success if body.success is not None else True,
        prompt_id=body.prompt_id or LENIENT_DEFAULT_PROMPT_ID,
        model_used=body.model_used or LENIENT_DEFAULT_MODEL,
        tokens_used=body.tokens_used or 0,
        cost=body.cost or 0,
    )
    logger.info("Saved metrics for workflow %s", metric.workflow_id)
    return {
        "id": metric.id,
        "success": True,
        "message": "Metrics saved successfully",
        "time_saved": body.time_saved or execution_time * LENIENT_TIME_SAVED_MULTIPLIER,
        "cost_saved": body.cost_saved or LENIENT_DEFAULT_COST_SAVED,
    }
