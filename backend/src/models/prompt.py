"""Prompt model for storing user prompt templates."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class Prompt(Base, TimestampMixin):
    """Prompt model - a named prompt template owned by a single Auth0 account."""

    __tablename__ = "prompts"
    # AUTOINCREMENT keeps SQLite from reusing the id of the most recently deleted row
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    # Auth0 `sub` claim; accounts live in Auth0, so there is no local users table
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Prompt id={self.id} name={self.name!r}>"
