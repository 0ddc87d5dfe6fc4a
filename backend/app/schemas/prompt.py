"""Prompt request/response schemas."""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PromptCreate(BaseModel):
    # Presence is checked in the route so the 400 message names every field
    name: Optional[str] = None
    model: Optional[str] = None
    template: Optional[str] = None
    performance_score: Optional[float] = None

    model_config = {"protected_namespaces": ()}


class PromptUpdate(BaseModel):
    name: Optional[str] = None
    model: Optional[str] = None
    template: Optional[str] = None
    performance_score: Optional[float] = None

    model_config = {"protected_namespaces": ()}


class PromptResponse(BaseModel):
    id: int
    name: str
    model: str
    template: str
    performance_score: Optional[float] = None
    usage_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class PromptUsageResponse(BaseModel):
    message: str
    id: int
    usage_count: int


class PromptScoreResponse(BaseModel):
    message: str
    id: int
    performance_score: Optional[float] = None
    executions: int = 0
