"""Raster Bounded Context - Metadata schema versions.

Every descriptor carries the schema version it was written with. There is no
in-place migration: a record from any other version means the whole metadata
index must be regenerated from the source rasters.

History:
    2.1: file names are relative to the data directory
    2.2: [regeneration required] file format is a DEMFileDefinition
         (name + type + extension + registration), lat/lon bound field
         names changed for clarity
"""

from __future__ import annotations

from enum import Enum

from domain.raster.errors import OutdatedMetadataError, UnknownMetadataVersionError


class MetadataVersion(str, Enum):
    V2_1 = "2.1"
    V2_2 = "2.2"


CURRENT_VERSION = MetadataVersion.V2_2
FILEMETADATA_VERSION: str = CURRENT_VERSION.value


def check_metadata_version(version: str | None) -> MetadataVersion:
    """Return the version if it is the current one.

    Raises:
        OutdatedMetadataError: Known tag from an older schema
        UnknownMetadataVersionError: Missing, empty or unrecognized tag
    """
    try:
        parsed = MetadataVersion(version)
    except ValueError as e:
        raise UnknownMetadataVersionError(version) from e
    if parsed is not CURRENT_VERSION:
        raise OutdatedMetadataError(parsed.value, FILEMETADATA_VERSION)
    return parsed


def is_current_version(version: str | None) -> bool:
    return version == FILEMETADATA_VERSION
