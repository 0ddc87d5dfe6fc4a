"""Context template request/response schemas."""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ContextTemplateCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    template: Optional[str] = None
    category: Optional[str] = None


class ContextTemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    template: str
    category: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
