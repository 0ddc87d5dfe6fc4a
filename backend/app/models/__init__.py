"""Import all models so SQLAlchemy metadata knows about them."""
from app.models.base import Base
from app.models.prompt import Prompt
from app.models.workflow_metric import WorkflowMetric
from app.models.context_template import ContextTemplate

__all__ = ["Base", "Prompt", "WorkflowMetric", "ContextTemplate"]
