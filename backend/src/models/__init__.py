"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.prompt import Prompt

__all__ = ["Base", "Prompt", "TimestampMixin"]
