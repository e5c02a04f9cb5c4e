"""Raster Bounded Context - Error Hierarchy.

Custom exceptions for tile metadata operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.raster.value_objects import TileKey


class RasterMetadataError(Exception):
    """Base error for tile metadata operations."""


class NoDataValueParseError(RasterMetadataError, ValueError):
    """Textual no-data sentinel is not a number."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"No-data value is not numeric: {text!r}")


class UnsupportedFileFormatError(RasterMetadataError, ValueError):
    """File extension does not match any known DEM file definition."""


# ---------------------------------------------------------------------------
# Schema versioning
# ---------------------------------------------------------------------------
class MetadataRegenerationRequiredError(RasterMetadataError):
    """Persisted metadata cannot be used as-is; regenerate the whole index.

    Attributes:
        version: The version tag found in the persisted record
    """

    def __init__(self, version: str | None, message: str) -> None:
        self.version = version
        super().__init__(message)


class OutdatedMetadataError(MetadataRegenerationRequiredError):
    """Metadata was written by an older, known schema version."""

    def __init__(self, version: str, current: str) -> None:
        super().__init__(
            version,
            f"Metadata version {version} is outdated (current {current}); "
            "regenerate the metadata index",
        )


class UnknownMetadataVersionError(MetadataRegenerationRequiredError):
    """Metadata carries a version tag this build does not know."""

    def __init__(self, version: str | None) -> None:
        super().__init__(
            version,
            f"Unknown metadata version {version!r}; regenerate the metadata index",
        )


# ---------------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------------
class TileKeyCollisionError(RasterMetadataError):
    """Two different files share the same base name.

    Descriptors are keyed by base name only, so such files would be
    treated as the same tile.
    """

    def __init__(self, key: "TileKey", first: str, second: str) -> None:
        self.key = key
        self.first = first
        self.second = second
        super().__init__(
            f"Tile key {key.name!r} is shared by {first!r} and {second!r}"
        )


class InvalidTemplateError(RasterMetadataError, ValueError):
    """Template descriptor cannot define a tile grid (zero-area bounds)."""


class VirtualMetadataPersistenceError(RasterMetadataError):
    """Virtual descriptors have no backing file and are never persisted."""


class InvalidMetadataFileError(RasterMetadataError):
    """Persisted metadata is not valid JSON or does not match the schema."""


# ---------------------------------------------------------------------------
# Metadata extraction (infrastructure adapters)
# ---------------------------------------------------------------------------
class InvalidRasterError(RasterMetadataError):
    """File is not a valid raster, wrong format, or corrupted."""


class MissingCRSError(RasterMetadataError):
    """Raster has no CRS defined."""


class InvalidGeotransformError(RasterMetadataError):
    """Raster has invalid, rotated, or missing geotransform."""
