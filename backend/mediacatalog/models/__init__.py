"""SQLAlchemy ORM models for the catalog."""

from mediacatalog.models.base import Base
from mediacatalog.models.file import File
from mediacatalog.models.folder import Folder

__all__ = [
    "Base",
    "File",
    "Folder",
]
