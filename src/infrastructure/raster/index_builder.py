"""Metadata index generation for a DEM data directory.

Walks a data directory, reuses stored descriptors that load at the current
schema version and regenerates everything else from the rasters themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from domain.raster.errors import (
    InvalidMetadataFileError,
    MetadataRegenerationRequiredError,
    RasterMetadataError,
)
from domain.raster.formats import (
    KNOWN_DEFINITIONS,
    DEMFileDefinition,
    normalize_extension,
)
from domain.raster.repositories import MetadataRepository, RasterMetadataReader
from domain.raster.value_objects import TileKey

logger = logging.getLogger(__name__)


class IndexBuildReport(BaseModel):
    """Outcome of an index build, as file names relative to the data directory."""

    generated: tuple[str, ...] = ()
    reused: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return not self.failed


def find_raster_files(
    data_dir: Path, formats: tuple[DEMFileDefinition, ...] = KNOWN_DEFINITIONS
) -> list[Path]:
    """Return raster files under data_dir with a known extension, sorted."""
    extensions = {d.extension for d in formats}
    return sorted(
        p
        for p in data_dir.rglob("*")
        if p.is_file() and normalize_extension(p.suffix) in extensions
    )


def _reusable(store: MetadataRepository, relative: str) -> bool:
    if not store.exists(relative):
        return False
    try:
        stored = store.load(relative)
    except MetadataRegenerationRequiredError as e:
        logger.info("Metadata %s: %s", TileKey.from_filename(relative), e)
        return False
    except InvalidMetadataFileError as e:
        logger.warning(
            "Metadata %s: unreadable record (%s)", TileKey.from_filename(relative), e
        )
        return False
    # Same key, other directory: the stored record describes a different file
    return stored.filename == relative


def build_metadata_index(
    data_dir: Path | str,
    store: MetadataRepository,
    reader: RasterMetadataReader,
    force: bool = False,
    formats: tuple[DEMFileDefinition, ...] = KNOWN_DEFINITIONS,
) -> IndexBuildReport:
    """Generate or refresh the metadata of every raster under data_dir.

    Args:
        data_dir: Root of the DEM dataset; descriptor file names are
            relative to it
        store: Where descriptors are persisted
        reader: Extracts descriptors from raster files
        force: Regenerate every descriptor, even current ones
        formats: File definitions to index

    Returns:
        IndexBuildReport. Files the reader rejects and files whose base name
        is already used by another file are reported as failed.
    """
    data_dir = Path(data_dir)
    generated: list[str] = []
    reused: list[str] = []
    failed: list[str] = []
    seen: dict[TileKey, str] = {}

    for path in find_raster_files(data_dir, formats):
        relative = path.relative_to(data_dir).as_posix()
        key = TileKey.from_filename(relative)

        if key in seen:
            logger.error(
                "Metadata %s: base name already used by %s, skipping",
                relative,
                seen[key],
            )
            failed.append(relative)
            continue
        seen[key] = relative

        if not force and _reusable(store, relative):
            reused.append(relative)
            continue

        try:
            metadata = reader.read_metadata(path, data_dir=data_dir)
        except (RasterMetadataError, OSError, ValueError) as e:
            logger.error("Metadata %s: %s", key, e)
            failed.append(relative)
            continue

        store.save(metadata)
        generated.append(relative)

    logger.info(
        "Metadata index: %d generated, %d reused, %d failed",
        len(generated),
        len(reused),
        len(failed),
    )
    return IndexBuildReport(
        generated=tuple(generated), reused=tuple(reused), failed=tuple(failed)
    )
