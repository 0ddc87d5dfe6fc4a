"""Queries over workflow execution metrics.

Routes stay thin; every function here takes the request's session and runs a
single statement (or a short fixed sequence) as one unit of work.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import case, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.models.prompt import Prompt
from app.models.workflow_metric import WorkflowMetric

logger = logging.getLogger(__name__)

_success_as_float = case((WorkflowMetric.success == True, 1.0), else_=0.0)


def new_workflow_id() -> str:
    return str(uuid.uuid4())


async def record_metric(
    db: AsyncSession,
    *,
    workflow_id: Optional[str] = None,
    workflow_name: Optional[str] = None,
    execution_time: Optional[float] = None,
    success: Optional[bool] = None,
    prompt_id: Optional[int] = None,
    model_used: Optional[str] = None,
    tokens_used: Optional[int] = None,
    cost: Optional[float] = None,
    error_message: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> WorkflowMetric:
    """Insert one execution record. No deduplication by workflow_id."""
    metric = WorkflowMetric(
        workflow_id=workflow_id or new_workflow_id(),
        workflow_name=workflow_name,
        execution_time=execution_time,
        success=success,
        prompt_id=prompt_id,
        model_used=model_used,
        tokens_used=tokens_used,
        cost=cost,
        error_message=error_message,
    )
    if created_at is not None:
        metric.created_at = created_at
    db.add(metric)
    await db.commit()
    await db.refresh(metric)
    return metric


async def list_metrics(db: AsyncSession, limit: int = 100, offset: int = 0) -> list[dict]:
    """Newest first, each row joined with its prompt's name (None if absent)."""
    result = await db.execute(
        select(WorkflowMetric, Prompt.name.label("prompt_name"))
        .outerjoin(Prompt, WorkflowMetric.prompt_id == Prompt.id)
        .order_by(desc(WorkflowMetric.created_at), desc(WorkflowMetric.id))
        .limit(limit)
        .offset(offset)
    )
    return [_to_response(metric, prompt_name) for metric, prompt_name in result.all()]


async def workflow_stats(
    db: AsyncSession, window_days: int = 30, now: Optional[datetime] = None
) -> dict:
    """Aggregate over records created within the trailing window."""
    cutoff = (now or utcnow()) - timedelta(days=window_days)
    row = (await db.execute(
        select(
            func.count(WorkflowMetric.id),
            func.sum(case((WorkflowMetric.success == True, 1), else_=0)),
            func.avg(WorkflowMetric.execution_time),
            func.sum(WorkflowMetric.tokens_used),
            func.sum(WorkflowMetric.cost),
            func.count(func.distinct(WorkflowMetric.workflow_id)),
        ).where(WorkflowMetric.created_at >= cutoff)
    )).one()

    total, successful, avg_time, tokens, cost, unique = row
    return {
        "total_executions": total or 0,
        "successful_executions": int(successful or 0),
        "avg_execution_time": float(avg_time) if avg_time is not None else None,
        "total_tokens": int(tokens) if tokens is not None else None,
        "total_cost": float(cost) if cost is not None else None,
        "unique_workflows": unique or 0,
    }


async def model_performance(db: AsyncSession) -> list[dict]:
    """Per-model aggregates over all time, best success rate first."""
    success_rate = func.avg(_success_as_float).label("success_rate")
    result = await db.execute(
        select(
            WorkflowMetric.model_used,
            func.count(WorkflowMetric.id).label("total_uses"),
            success_rate,
            func.avg(WorkflowMetric.execution_time).label("avg_execution_time"),
            func.sum(WorkflowMetric.tokens_used).label("total_tokens"),
            func.sum(WorkflowMetric.cost).label("total_cost"),
        )
        .where(WorkflowMetric.model_used.isnot(None))
        .group_by(WorkflowMetric.model_used)
        .order_by(desc(success_rate), WorkflowMetric.model_used)
    )
    return [
        {
            "model_used": r.model_used,
            "total_uses": r.total_uses,
            "success_rate": float(r.success_rate or 0.0),
            "avg_execution_time": float(r.avg_execution_time) if r.avg_execution_time is not None else None,
            "total_tokens": int(r.total_tokens) if r.total_tokens is not None else None,
            "total_cost": float(r.total_cost) if r.total_cost is not None else None,
        }
        for r in result.all()
    ]


async def prompt_success_rate(db: AsyncSession, prompt_id: int) -> tuple[Optional[float], int]:
    """Mean success over a prompt's executions and how many there were.

    The mean is None when the prompt has never been executed.
    """
    row = (await db.execute(
        select(func.avg(_success_as_float), func.count(WorkflowMetric.id))
        .where(WorkflowMetric.prompt_id == prompt_id)
    )).one()
    rate, count = row
    return (float(rate) if rate is not None else None), count


async def prune_metrics(db: AsyncSession, older_than_days: int, now: Optional[datetime] = None) -> int:
    """Delete records older than the retention window. Returns rows removed."""
    if older_than_days <= 0:
        return 0
    cutoff = (now or utcnow()) - timedelta(days=older_than_days)
    result = await db.execute(
        delete(WorkflowMetric).where(WorkflowMetric.created_at < cutoff)
    )
    await db.commit()
    if result.rowcount:
        logger.info("Pruned %d workflow metrics older than %d days", result.rowcount, older_than_days)
    return result.rowcount or 0


def _to_response(metric: WorkflowMetric, prompt_name: Optional[str] = None) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": metric.id,
        "workflow_id": metric.workflow_id,
        "workflow_name": metric.workflow_name,
        "execution_time": metric.execution_time,
        "success": metric.success,
        "prompt_id": metric.prompt_id,
        "prompt_name": prompt_name,
        "model_used": metric.model_used,
        "tokens_used": metric.tokens_used,
        "cost": metric.cost,
        "error_message": metric.error_message,
        "created_at": metric.created_at,
    }
