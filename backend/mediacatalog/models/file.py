"""File model — catalogued file owned by exactly one folder."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediacatalog.models.base import Base

if TYPE_CHECKING:
    from mediacatalog.models.folder import Folder


class File(Base):
    __tablename__ = "files"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    folder_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("folders.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    extension: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    size: Mapped[int] = mapped_column(Integer, default=0, index=True)
    created_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    modified_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    accessed_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    scanned_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    folder: Mapped[Optional["Folder"]] = relationship(back_populates="files")

    def __repr__(self) -> str:
        return f"<File(id={self.id}, name='{self.name}')>"
