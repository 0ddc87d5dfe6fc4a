"""Context templates API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.context_template import ContextTemplate
from app.schemas.context_template import ContextTemplateCreate, ContextTemplateResponse

router = APIRouter(prefix="/api/context-templates", tags=["context-templates"])


@router.get("", response_model=list[ContextTemplateResponse])
async def list_context_templates(db: AsyncSession = Depends(get_db)):
    """List all context templates grouped by category."""
    result = await db.execute(
        select(ContextTemplate).order_by(ContextTemplate.category, ContextTemplate.name)
    )
    return [_to_response(t) for t in result.scalars().all()]


@router.post("", response_model=ContextTemplateResponse)
async def create_context_template(
    body: ContextTemplateCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new context template."""
    if not (body.name and body.name.strip() and body.template and body.template.strip()):
        raise HTTPException(status_code=400, detail="Name and template are required")

    template = ContextTemplate(**body.model_dump())
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return _to_response(template)


def _to_response(template: ContextTemplate) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "template": template.template,
        "category": template.category,
        "created_at": template.created_at,
    }
