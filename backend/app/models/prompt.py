"""Prompt model - AI instruction templates with a tracked performance score."""
from sqlalchemy import String, Text, Integer, Float
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin

DEFAULT_PERFORMANCE_SCORE = 0.5


class Prompt(Base, TimestampMixin):
    __tablename__ = "prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    template: Mapped[str] = mapped_column(Text, nullable=False)
    # Null after a score recompute over zero executions
    performance_score: Mapped[float | None] = mapped_column(
        Float, nullable=True, default=DEFAULT_PERFORMANCE_SCORE
    )
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
