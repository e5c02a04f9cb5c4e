"""Raster Bounded Context - DEM file definitions.

A DEM file definition names a raster format, the file extension it uses and
how its samples are registered against the pixel grid. Descriptors reference
a definition; they never interpret the file contents themselves.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from domain.raster.errors import UnsupportedFileFormatError


class DEMFileType(str, Enum):
    GEOTIFF = "GeoTiff"
    SRTM_HGT = "SRTM_HGT"
    ASCII_GRID = "ASCIIGrid"
    NETCDF = "netCDF"


class DEMFileRegistrationMode(str, Enum):
    """How samples relate to the pixel grid.

    GRID: samples sit on grid nodes. The first and last sample are the
        centres of the edge pixels, half a pixel inside the image edges.
    CELL: each sample covers a cell area. Data extent equals image extent.
    """

    GRID = "Grid"
    CELL = "Cell"


class DEMFileDefinition(BaseModel):
    """Raster format tag referenced by tile descriptors (Value Object)."""

    name: str
    file_type: DEMFileType
    extension: str  # lower-case, leading dot
    registration: DEMFileRegistrationMode

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Well-known definitions
# ---------------------------------------------------------------------------
SRTM_HGT = DEMFileDefinition(
    name="Nasa SRTM HGT",
    file_type=DEMFileType.SRTM_HGT,
    extension=".hgt",
    registration=DEMFileRegistrationMode.GRID,
)
GEOTIFF = DEMFileDefinition(
    name="GeoTiff file",
    file_type=DEMFileType.GEOTIFF,
    extension=".tif",
    registration=DEMFileRegistrationMode.CELL,
)
ASCII_GRID = DEMFileDefinition(
    name="ESRI ASCII Grid",
    file_type=DEMFileType.ASCII_GRID,
    extension=".asc",
    registration=DEMFileRegistrationMode.CELL,
)
NETCDF = DEMFileDefinition(
    name="netCDF file",
    file_type=DEMFileType.NETCDF,
    extension=".nc",
    registration=DEMFileRegistrationMode.GRID,
)

KNOWN_DEFINITIONS: tuple[DEMFileDefinition, ...] = (
    SRTM_HGT,
    GEOTIFF,
    ASCII_GRID,
    NETCDF,
)

# Alternative spellings mapped to the canonical extension
_EXTENSION_ALIASES = {".tiff": ".tif"}


def normalize_extension(suffix: str) -> str:
    suffix = suffix.lower()
    return _EXTENSION_ALIASES.get(suffix, suffix)


def definition_for_path(
    path: PurePath | str,
    definitions: tuple[DEMFileDefinition, ...] = KNOWN_DEFINITIONS,
) -> DEMFileDefinition:
    """Return the definition whose extension matches the path suffix.

    Raises:
        UnsupportedFileFormatError: If no definition uses that extension
    """
    suffix = normalize_extension(PurePath(path).suffix)
    for definition in definitions:
        if definition.extension == suffix:
            return definition
    raise UnsupportedFileFormatError(f"Unsupported file extension: {suffix!r}")
