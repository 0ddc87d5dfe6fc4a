"""Workflow metric request/response schemas."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class WorkflowMetricCreate(BaseModel):
    """Strict ingestion body: types are not coerced."""
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    execution_time: Optional[float] = Field(None, ge=0)
    success: Optional[bool] = None
    prompt_id: Optional[int] = None
    model_used: Optional[str] = None
    tokens_used: Optional[int] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    error_message: Optional[str] = None

    model_config = {"strict": True, "protected_namespaces": ()}


class LenientMetricCreate(BaseModel):
    """Body for the compatibility endpoint used by less strict callers."""
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    execution_time: Optional[float] = None
    success: Optional[bool] = None
    prompt_id: Optional[int] = None
    model_used: Optional[str] = None
    tokens_used: Optional[int] = None
    cost: Optional[float] = None
    time_saved: Optional[float] = None
    cost_saved: Optional[float] = None

    model_config = {"protected_namespaces": ()}


class WorkflowMetricCreated(BaseModel):
    id: int
    workflow_id: str


class LenientMetricCreated(BaseModel):
    id: int
    success: bool = True
    message: str
    time_saved: float
    cost_saved: float


class WorkflowMetricResponse(BaseModel):
    id: int
    workflow_id: str
    workflow_name: Optional[str] = None
    execution_time: Optional[float] = None
    success: Optional[bool] = None
    prompt_id: Optional[int] = None
    prompt_name: Optional[str] = None
    model_used: Optional[str] = None
    tokens_used: Optional[int] = None
    cost: Optional[float] = None
    error_message: Optional[str] = None
    created_at: datetime

    model_config = {"protected_namespaces": ()}


class WorkflowStats(BaseModel):
    total_executions: int = 0
    successful_executions: int = 0
    avg_execution_time: Optional[float] = None
    total_tokens: Optional[int] = None
    total_cost: Optional[float] = None
    unique_workflows: int = 0


class ModelPerformance(BaseModel):
    model_used: str
    total_uses: int
    success_rate: float
    avg_execution_time: Optional[float] = None
    total_tokens: Optional[int] = None
    total_cost: Optional[float] = None

    model_config = {"protected_namespaces": ()}
