"""Raster Bounded Context - Domain Services.

Pure functions over collections of tile descriptors: deduplication, lookup by
file name, coverage queries and virtual tiles for coverage gaps.
NO I/O operations - metadata extraction and persistence are implemented by
infrastructure adapters under `src/infrastructure/raster/`.

All queries are linear scans; building a persistent spatial index on top of
these descriptors is left to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable

from domain.raster.errors import InvalidTemplateError, TileKeyCollisionError
from domain.raster.file_metadata import FileMetadata, new_virtual_filename
from domain.raster.value_objects import BoundingBox, TileKey

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Slack when snapping query bounds to the tile grid, absorbs float noise
# such as 5.999999999 for a tile edge at 6
GRID_EPSILON = 1e-9


# ---------------------------------------------------------------------------
# Identity helpers
# ---------------------------------------------------------------------------
def deduplicate(descriptors: Iterable[FileMetadata]) -> list[FileMetadata]:
    """Keep the first descriptor per tile key, preserving order."""
    seen: set[TileKey] = set()
    result: list[FileMetadata] = []
    for descriptor in descriptors:
        if descriptor.tile_key not in seen:
            seen.add(descriptor.tile_key)
            result.append(descriptor)
    return result


def index_by_key(descriptors: Iterable[FileMetadata]) -> dict[TileKey, FileMetadata]:
    """Map tile keys to descriptors.

    Descriptors with the exact same filename collapse into one entry.

    Raises:
        TileKeyCollisionError: If different file names share a base name
    """
    index: dict[TileKey, FileMetadata] = {}
    for descriptor in descriptors:
        existing = index.get(descriptor.tile_key)
        if existing is None:
            index[descriptor.tile_key] = descriptor
        elif existing.filename != descriptor.filename:
            raise TileKeyCollisionError(
                descriptor.tile_key, existing.filename, descriptor.filename
            )
    return index


def find_by_filename(
    descriptors: Iterable[FileMetadata], filename: str
) -> FileMetadata | None:
    """Return the descriptor whose tile key matches filename, if any."""
    key = TileKey.from_filename(filename)
    for descriptor in descriptors:
        if descriptor.tile_key == key:
            return descriptor
    return None


# ---------------------------------------------------------------------------
# Coverage queries
# ---------------------------------------------------------------------------
def _touches(a: BoundingBox, b: BoundingBox) -> bool:
    return (
        a.min_x <= b.max_x
        and b.min_x <= a.max_x
        and a.min_y <= b.max_y
        and b.min_y <= a.max_y
    )


def covering_tiles(
    descriptors: Iterable[FileMetadata], bbox: BoundingBox
) -> list[FileMetadata]:
    """Return real descriptors whose bounding box meets the query.

    A query with area needs a positive-area overlap; tiles that only share
    an edge are left out. A degenerate query (point or line) matches every
    tile it touches.
    """
    if bbox.is_degenerate():
        matches = (d for d in descriptors if _touches(d.bounding_box, bbox))
    else:
        matches = (d for d in descriptors if d.bounding_box.intersects(bbox))
    return [d for d in matches if not d.virtual_metadata]


def _cell_range(lo: float, hi: float, origin: float, size: float) -> range:
    first = math.floor((lo - origin) / size + GRID_EPSILON)
    last = math.ceil((hi - origin) / size - GRID_EPSILON) - 1
    return range(first, max(first, last) + 1)


def _missing_cells(
    bbox: BoundingBox, descriptors: Iterable[FileMetadata], template: FileMetadata
) -> list[tuple[float, float, BoundingBox]]:
    """Return (d_lon, d_lat, cell) for every uncovered grid cell.

    The grid is aligned on the template bounding box and uses its size.
    A cell is covered when a real descriptor contains its centre.
    """
    grid = template.bounding_box
    if grid.is_degenerate():
        raise InvalidTemplateError(f"Template tile has no area: {template}")

    real = [d.bounding_box for d in descriptors if not d.virtual_metadata]
    missing: list[tuple[float, float, BoundingBox]] = []
    for row in _cell_range(bbox.min_y, bbox.max_y, grid.min_y, grid.height):
        for col in _cell_range(bbox.min_x, bbox.max_x, grid.min_x, grid.width):
            d_lon = col * grid.width
            d_lat = row * grid.height
            cell = BoundingBox.from_extents(
                grid.min_x + d_lon,
                grid.max_x + d_lon,
                grid.min_y + d_lat,
                grid.max_y + d_lat,
            )
            cx, cy = cell.center()
            if not any(box.contains_point(cx, cy) for box in real):
                missing.append((d_lon, d_lat, cell))
    return missing


def missing_tile_cells(
    bbox: BoundingBox, descriptors: Iterable[FileMetadata], template: FileMetadata
) -> list[BoundingBox]:
    """Return the tile-grid cells touched by bbox that no real tile covers.

    Raises:
        InvalidTemplateError: If the template bounding box has no area
    """
    return [cell for _, _, cell in _missing_cells(bbox, descriptors, template)]


def is_covered(
    bbox: BoundingBox,
    descriptors: Iterable[FileMetadata],
    template: FileMetadata | None = None,
) -> bool:
    """Check whether real tiles cover every grid cell of bbox.

    The tile grid comes from template, or from the first covering tile when
    no template is given. Without any covering tile the answer is False.
    """
    descriptors = list(descriptors)
    if template is None:
        covering = covering_tiles(descriptors, bbox)
        if not covering:
            return False
        template = covering[0]
    return not _missing_cells(bbox, descriptors, template)


def fill_coverage_gaps(
    bbox: BoundingBox,
    descriptors: Iterable[FileMetadata],
    template: FileMetadata,
    filename_factory: Callable[[], str] = new_virtual_filename,
) -> list[FileMetadata]:
    """Create a virtual descriptor for each uncovered cell of bbox.

    Each virtual descriptor is the template cloned as virtual and moved onto
    the missing cell, so it shares the template's sample layout.

    Args:
        bbox: Queried region
        descriptors: Real descriptors available for the region
        template: Descriptor defining tile size, grid alignment and layout
        filename_factory: Source of synthetic file names

    Returns:
        Virtual descriptors, south to north then west to east

    Raises:
        InvalidTemplateError: If the template bounding box has no area
    """
    return [
        template.clone_as_virtual(filename_factory).translated(d_lon, d_lat)
        for d_lon, d_lat, _ in _missing_cells(bbox, descriptors, template)
    ]
