"""Media Catalog — local media-file catalog backend."""

__version__ = "1.0.0"
