"""Domain Port(s) for tile metadata I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .file_metadata import FileMetadata
from .formats import DEMFileDefinition


class RasterMetadataReader(Protocol):
    """Port for extracting descriptors from raster files.

    Implementations live in infrastructure (e.g., rasterio adapter).
    """

    def read_metadata(
        self,
        file_path: Path | str,
        file_format: DEMFileDefinition | None = None,
        data_dir: Path | str | None = None,
    ) -> FileMetadata:
        """Read raster headers and return a descriptor at the current version."""
        ...


class MetadataRepository(Protocol):
    """Port for persisting descriptors, one record per tile key."""

    def save(self, metadata: FileMetadata) -> Path:
        ...

    def load(self, filename: str) -> FileMetadata:
        ...

    def load_all(self) -> list[FileMetadata]:
        ...

    def exists(self, filename: str) -> bool:
        ...
