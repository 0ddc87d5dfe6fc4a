"""Workflow metric model - one immutable record per completed execution."""
from sqlalchemy import String, Text, Integer, Float, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, CreatedAtMixin


class WorkflowMetric(Base, CreatedAtMixin):
    __tablename__ = "workflow_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workflow_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    workflow_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    execution_time: Mapped[float | None] = mapped_column(Float, nullable=True)
    success: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Declared only; deleting a prompt leaves the reference dangling
    prompt_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("prompts.id"), nullable=True, index=True
    )

    model_used: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
