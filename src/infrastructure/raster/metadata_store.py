"""JSON persistence for tile descriptors.

One JSON document per tile key, stored as `<base name>.json` in a metadata
directory. Persisted fields are written in tag order; the bounding box and the
virtual flag are derived/synthetic state and never reach the stored form.

Records from any other schema version are rejected: the policy is a full
regeneration of the index, never an in-place upgrade.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from domain.raster.errors import (
    InvalidMetadataFileError,
    MetadataRegenerationRequiredError,
    VirtualMetadataPersistenceError,
)
from domain.raster.file_metadata import FileMetadata
from domain.raster.value_objects import TileKey
from domain.raster.versioning import check_metadata_version

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".json"


def dump_metadata(metadata: FileMetadata) -> str:
    """Serialize persisted fields to JSON.

    Raises:
        VirtualMetadataPersistenceError: If metadata is virtual
    """
    if metadata.virtual_metadata:
        raise VirtualMetadataPersistenceError(
            f"Virtual metadata {metadata.filename!r} cannot be persisted"
        )
    return metadata.model_dump_json(indent=2)


def load_metadata(text: str, check_version: bool = True) -> FileMetadata:
    """Deserialize a descriptor.

    Args:
        text: JSON document produced by dump_metadata
        check_version: Reject records that are not at the current version.
            Disable only to inspect old records for diagnostics.

    Raises:
        InvalidMetadataFileError: Not JSON, not an object, or schema mismatch
        MetadataRegenerationRequiredError: Outdated or unknown version
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidMetadataFileError(f"Invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise InvalidMetadataFileError("Metadata must be a JSON object")

    if check_version:
        check_metadata_version(raw.get("version"))

    try:
        return FileMetadata.model_validate(raw)
    except ValidationError as e:
        raise InvalidMetadataFileError(f"Invalid metadata: {e}") from e


class JsonMetadataStore:
    """Infrastructure adapter implementing MetadataRepository with JSON files.

    Parameters
    ----------
    metadata_dir: Path | str
        Directory holding one document per tile. Created on first save.
    suffix: str
        Appended to the tile base name to form the document name.
    """

    def __init__(self, metadata_dir: Path | str, suffix: str = DEFAULT_SUFFIX) -> None:
        self.metadata_dir = Path(metadata_dir)
        self.suffix = suffix

    def path_for(self, filename: str) -> Path:
        key = TileKey.from_filename(filename)
        return self.metadata_dir / f"{key.name}{self.suffix}"

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def save(self, metadata: FileMetadata) -> Path:
        """Write metadata, replacing any record with the same tile key."""
        text = dump_metadata(metadata)
        path = self.path_for(metadata.filename)
        self.metadata_dir.mkdir(parents=True, exist_ok=True)
        # Write then rename so an interrupted save never leaves a partial record
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
        logger.info("Metadata %s: saved (version %s)", path.name, metadata.version)
        return path

    def load(self, filename: str) -> FileMetadata:
        """Load the record for filename's tile key.

        Raises:
            FileNotFoundError: If no record exists
            InvalidMetadataFileError: Unreadable record
            MetadataRegenerationRequiredError: Outdated or unknown version
        """
        path = self.path_for(filename)
        if not path.is_file():
            raise FileNotFoundError(path.name)
        return self._load_path(path)

    def load_all(self) -> list[FileMetadata]:
        """Load every record, in document name order."""
        if not self.metadata_dir.is_dir():
            return []
        return [
            self._load_path(path)
            for path in sorted(self.metadata_dir.glob(f"*{self.suffix}"))
        ]

    def delete_all(self) -> int:
        """Remove every record; used before regenerating the whole index."""
        if not self.metadata_dir.is_dir():
            return 0
        count = 0
        for path in self.metadata_dir.glob(f"*{self.suffix}"):
            path.unlink()
            count += 1
        logger.info("Deleted %d metadata records", count)
        return count

    def _load_path(self, path: Path) -> FileMetadata:
        try:
            text = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            # OSError text carries the absolute path, keep the reason only
            reason = getattr(e, "strerror", None) or e
            raise InvalidMetadataFileError(
                f"Unreadable record {path.name}: {reason}"
            ) from e
        try:
            metadata = load_metadata(text)
        except MetadataRegenerationRequiredError as e:
            logger.warning("Metadata %s: %s", path.name, e)
            raise
        logger.debug("Metadata %s: loaded", path.name)
        return metadata
