"""Document analysis result schemas."""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class KeyTerm(BaseModel):
    term: str
    context: str = ""
    importance: Literal["low", "medium", "high"] = "medium"
    location: Optional[str] = None


class DateItem(BaseModel):
    date: str
    type: str
    description: str = ""
    is_critical: bool = False


class Party(BaseModel):
    name: str
    role: str
    obligations: List[str] = Field(default_factory=list)


class Obligation(BaseModel):
    party: str
    description: str
    deadline: Optional[str] = None
    status: Literal["active", "pending", "completed"] = "active"


class Extraction(BaseModel):
    document_type: str
    confidence: float = Field(ge=0, le=1)
    key_terms: List[KeyTerm] = Field(default_factory=list)
    dates: List[DateItem] = Field(default_factory=list)
    parties: List[Party] = Field(default_factory=list)
    obligations: List[Obligation] = Field(default_factory=list)


class Analysis(BaseModel):
    summary: str
    key_findings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    complexity: Literal["low", "medium", "high"] = "medium"
    estimated_review_time: float = 0.0  # hours


class Risk(BaseModel):
    category: str
    severity: Literal["low", "medium", "high", "critical"]
    description: str
    mitigation: str = ""
    probability: int = Field(default=50, ge=0, le=100)


class ActionItem(BaseModel):
    id: str
    title: str
    description: str = ""
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    status: Literal["pending", "in_progress", "completed"] = "pending"
    estimated_time: float = 0.0


class DocumentAnalysis(BaseModel):
    """Structured result returned by a document analyzer."""
    extraction: Extraction
    analysis: Analysis
    risks: List[Risk] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    time_saved: float = 0.0
    cost_saved: float = 0.0


class DocumentMetadata(BaseModel):
    processing_time: float
    file_name: str
    file_size: int
    document_type: str
    analyzer: str
    cached: bool = False
    timestamp: datetime


class ProcessedDocument(DocumentAnalysis):
    metadata: DocumentMetadata


class ProcessingMetrics(BaseModel):
    file_name: str
    file_size: int
    document_type: str
    processing_time: float
    time_saved: float
    cost_saved: float
    confidence: float
    workflow_id: str
    timestamp: datetime


class ProcessDocumentResponse(BaseModel):
    success: bool = True
    analysis: ProcessedDocument
    metrics: ProcessingMetrics
    message: str
