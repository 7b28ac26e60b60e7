"""Folder model — one row per catalogued directory."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediacatalog.models.base import Base

if TYPE_CHECKING:
    from mediacatalog.models.file import File


class Folder(Base):
    __tablename__ = "folders"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(Text, unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    level: Mapped[int] = mapped_column(Integer, default=0, index=True)
    # ISO-8601 strings, compared lexicographically by the date filter
    created_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    modified_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    accessed_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    scanned_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    files: Mapped[list["File"]] = relationship(
        back_populates="folder", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, path='{self.path}')>"
