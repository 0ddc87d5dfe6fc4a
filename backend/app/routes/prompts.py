"""Prompts API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update, desc, nulls_last
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.base import utcnow
from app.models.prompt import Prompt, DEFAULT_PERFORMANCE_SCORE
from app.schemas.common import MessageResponse
from app.schemas.prompt import (
    PromptCreate,
    PromptUpdate,
    PromptResponse,
    PromptUsageResponse,
    PromptScoreResponse,
)
from app.services.workflow_metrics import prompt_success_rate

router = APIRouter(prefix="/api/prompts", tags=["prompts"])

REQUIRED_TEXT_FIELDS = ("name", "model", "template")


@router.get("", response_model=list[PromptResponse])
async def list_prompts(db: AsyncSession = Depends(get_db)):
    """List all prompts, best performing first."""
    result = await db.execute(
        select(Prompt).order_by(nulls_last(desc(Prompt.performance_score)), Prompt.id)
    )
    return [_to_response(p) for p in result.scalars().all()]


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a single prompt by ID."""
    return _to_response(await _get_or_404(db, prompt_id))


@router.post("", response_model=PromptResponse)
async def create_prompt(
    body: PromptCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new prompt. A missing or zero score falls back to the default."""
    if not all(_present(getattr(body, field)) for field in REQUIRED_TEXT_FIELDS):
        raise HTTPException(status_code=400, detail="Name, model, and template are required")

    prompt = Prompt(
        name=body.name,
        model=body.model,
        template=body.template,
        performance_score=body.performance_score or DEFAULT_PERFORMANCE_SCORE,
    )
    db.add(prompt)
    await db.commit()
    await db.refresh(prompt)
    return _to_response(prompt)


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: int,
    body: PromptUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a prompt. Absent or null fields keep their stored value."""
    prompt = await _get_or_404(db, prompt_id)

    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    for field in REQUIRED_TEXT_FIELDS:
        if field in update_data and not _present(update_data[field]):
            raise HTTPException(status_code=400, detail=f"{field.capitalize()} cannot be blank")
    for key, value in update_data.items():
        setattr(prompt, key, value)
    prompt.updated_at = utcnow()

    await db.commit()
    await db.refresh(prompt)
    return _to_response(prompt)


@router.delete("/{prompt_id}", response_model=MessageResponse)
async def delete_prompt(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a prompt. Metrics that reference it are left in place."""
    prompt = await _get_or_404(db, prompt_id)
    await db.delete(prompt)
    await db.commit()
    return {"message": "Prompt deleted successfully", "id": prompt_id}


@router.post("/{prompt_id}/use", response_model=PromptUsageResponse)
async def record_prompt_usage(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Increment usage_count by one in a single UPDATE."""
    result = await db.execute(
        update(Prompt)
        .where(Prompt.id == prompt_id)
        .values(usage_count=Prompt.usage_count + 1)
        .returning(Prompt.usage_count)
    )
    usage_count = result.scalar_one_or_none()
    if usage_count is None:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Prompt not found")
    await db.commit()
    return {"message": "Usage count updated", "id": prompt_id, "usage_count": usage_count}


@router.post("/{prompt_id}/update-score", response_model=PromptScoreResponse)
async def update_prompt_score(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Recompute performance_score as the success rate of the prompt's executions.

    With no executions on record the score becomes null.
    """
    prompt = await _get_or_404(db, prompt_id)
    rate, executions = await prompt_success_rate(db, prompt_id)

    prompt.performance_score = rate
    await db.commit()
    return {
        "message": "Performance score updated",
        "id": prompt_id,
        "performance_score": rate,
        "executions": executions,
    }


async def _get_or_404(db: AsyncSession, prompt_id: int) -> Prompt:
    result = await db.execute(select(Prompt).where(Prompt.id == prompt_id))
    prompt = result.scalar_one_or_none()
    if not prompt:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


def _present(value) -> bool:
    return bool(value and value.strip())


def _to_response(prompt: Prompt) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": prompt.id,
        "name": prompt.name,
        "model": prompt.model,
        "template": prompt.template,
        "performance_score": prompt.performance_score,
        "usage_count": prompt.usage_count,
        "created_at": prompt.created_at,
        "updated_at": prompt.updated_at,
    }
