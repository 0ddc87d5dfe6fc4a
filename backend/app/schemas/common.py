"""Shared Pydantic schemas."""
from datetime import datetime
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str


class MessageResponse(BaseModel):
    message: str
    id: int


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str
