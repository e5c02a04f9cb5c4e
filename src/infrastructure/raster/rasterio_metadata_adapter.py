"""Rasterio adapter for RasterMetadataReader.

Extracts a FileMetadata descriptor from a DEM file (GeoTIFF, SRTM HGT, ASCII
grid, netCDF - anything GDAL opens) by reading its headers only. Pixel data
is never decoded.

Lifecycle (to avoid resource leaks):
1) Check existence, extension allowlist and non-empty file
2) Enter rasterio.Env for GDAL configuration
3) Open dataset with context manager (rasterio.open)
4) Validate band count, CRS and geotransform
5) Derive physical and data extrema from the affine transform
6) Exit contexts to release GDAL handles
7) Return FileMetadata at the current schema version
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from affine import Affine
from pyproj import CRS as ProjCRS
from pyproj.exceptions import CRSError
from rasterio.errors import RasterioError

from domain.raster.errors import (
    InvalidGeotransformError,
    InvalidRasterError,
    MissingCRSError,
    UnsupportedFileFormatError,
)
from domain.raster.file_metadata import FileMetadata
from domain.raster.formats import (
    KNOWN_DEFINITIONS,
    DEMFileDefinition,
    DEMFileRegistrationMode,
    definition_for_path,
    normalize_extension,
)

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

# numpy dtype kind -> TIFF SampleFormat name
_SAMPLE_FORMATS = {"u": "UINT", "i": "INT", "f": "IEEEFP", "c": "COMPLEXIEEEFP"}

# Band tags written by `gdalinfo -stats` and most DEM producers
_STATISTICS_MINIMUM = "STATISTICS_MINIMUM"
_STATISTICS_MAXIMUM = "STATISTICS_MAXIMUM"


def _world_units(crs: Any) -> str:
    """Return the unit name of the first CRS axis ("degree", "metre", ...)."""
    try:
        proj_crs = ProjCRS.from_user_input(crs.to_string())
    except CRSError as e:
        raise MissingCRSError(f"Unrecognized CRS: {e}") from e
    if not proj_crs.axis_info:
        return ""
    return proj_crs.axis_info[0].unit_name


def _validate_transform(transform: Any) -> None:
    if not isinstance(transform, Affine):
        raise InvalidGeotransformError("Missing affine transform")
    if any(
        math.isnan(v) or math.isinf(v)
        for v in (
            transform.a,
            transform.b,
            transform.c,
            transform.d,
            transform.e,
            transform.f,
        )
    ):
        raise InvalidGeotransformError("Invalid (NaN/Inf) transform values")
    if transform.a == 0 or transform.e == 0:
        raise InvalidGeotransformError("Invalid transform scale (zero)")
    if transform.b != 0 or transform.d != 0:
        raise InvalidGeotransformError("Rotated transforms are not supported")


def _float_tag(tags: dict[str, str], key: str, name: str) -> float:
    value = tags.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except ValueError:
        # Altitude range is only a hint, a broken tag must not block indexing
        logger.warning("Metadata %s: ignoring non-numeric %s tag", name, key)
        return 0.0


class RasterioMetadataAdapter:
    """Infrastructure adapter building tile descriptors from raster headers.

    Parameters
    ----------
    allowed_formats: tuple[DEMFileDefinition, ...]
        File definitions accepted by this adapter. Files whose extension
        matches none of them are rejected before GDAL is involved.
    """

    def __init__(
        self, allowed_formats: tuple[DEMFileDefinition, ...] = KNOWN_DEFINITIONS
    ) -> None:
        self.allowed_formats = allowed_formats

    def read_metadata(
        self,
        file_path: Path | str,
        file_format: DEMFileDefinition | None = None,
        data_dir: Path | str | None = None,
    ) -> FileMetadata:
        """Read raster headers and return a descriptor.

        Args:
            file_path: Raster file to describe
            file_format: Definition to record; inferred from the extension
                when omitted
            data_dir: Root of the DEM dataset. When given, the descriptor
                filename is relative to it (POSIX separators).

        Raises:
            FileNotFoundError: If file_path does not exist
            UnsupportedFileFormatError: If the extension is not allowed or
                does not match file_format
            InvalidRasterError: Empty, corrupted or multi-band raster
            MissingCRSError: Raster has no (usable) CRS
            InvalidGeotransformError: NaN, zero-scale or rotated transform
        """
        path = Path(file_path)

        # Check existence first to ensure missing files surface as FileNotFoundError
        if not path.exists():
            raise FileNotFoundError(str(path))

        if file_format is None:
            file_format = definition_for_path(path, self.allowed_formats)
        elif normalize_extension(path.suffix) != file_format.extension:
            raise UnsupportedFileFormatError(
                f"Extension {path.suffix!r} does not match {file_format.name}"
            )

        try:
            if path.stat().st_size == 0:
                raise InvalidRasterError("Empty file")
        except OSError as e:
            # Log only filename, errno, and strerror to avoid leaking absolute paths
            logger.error(
                "Failed to stat %s (errno=%s, strerror=%s)",
                path.name,
                getattr(e, "errno", "unknown"),
                getattr(e, "strerror", "unknown"),
            )
            raise

        filename = _relative_filename(path, data_dir)

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    return self._describe(src, filename, file_format, path.name)
        except PermissionError as e:
            # Re-raise with filename only to avoid leaking full path in logs
            raise PermissionError(path.name) from e
        except RasterioError as e:
            raise InvalidRasterError(f"Corrupted or invalid raster: {e}") from e

    def _describe(
        self,
        src: Any,
        filename: str,
        file_format: DEMFileDefinition,
        name: str,
    ) -> FileMetadata:
        if src.count != 1:
            raise InvalidRasterError(f"Expected 1 band, got {src.count}")
        if src.crs is None:
            raise MissingCRSError("Raster has no CRS defined")

        transform: Affine = src.transform
        _validate_transform(transform)
        width, height = src.width, src.height

        # Physical image corners
        physical_start_lon, physical_start_lat = transform * (0, 0)
        physical_end_lon, physical_end_lat = transform * (width, height)

        # Grid registered samples sit on the centres of the edge pixels
        if file_format.registration is DEMFileRegistrationMode.GRID:
            data_start_lon, data_start_lat = transform * (0.5, 0.5)
            data_end_lon, data_end_lat = transform * (width - 0.5, height - 0.5)
        else:
            data_start_lon, data_start_lat = physical_start_lon, physical_start_lat
            data_end_lon, data_end_lat = physical_end_lon, physical_end_lat

        dtype = np.dtype(src.dtypes[0])

        if src.nodata is None:
            no_data_value = ""
            logger.warning("Metadata %s: no nodata value defined", name)
        else:
            no_data_value = repr(float(src.nodata))

        tags = src.tags(1)

        metadata = FileMetadata.create(
            filename,
            file_format,
            height=height,
            width=width,
            pixel_scale_x=transform.a,
            pixel_scale_y=transform.e,
            data_start_lat=data_start_lat,
            data_start_lon=data_start_lon,
            data_end_lat=data_end_lat,
            data_end_lon=data_end_lon,
            bits_per_sample=dtype.itemsize * 8,
            world_units=_world_units(src.crs),
            sample_format=_SAMPLE_FORMATS.get(dtype.kind, "VOID"),
            no_data_value=no_data_value,
            scanline_size=width * dtype.itemsize,
            physical_start_lon=physical_start_lon,
            physical_start_lat=physical_start_lat,
            physical_end_lon=physical_end_lon,
            physical_end_lat=physical_end_lat,
            pixel_size_x=abs(transform.a),
            pixel_size_y=abs(transform.e),
            minimum_altitude=_float_tag(tags, _STATISTICS_MINIMUM, name),
            maximum_altitude=_float_tag(tags, _STATISTICS_MAXIMUM, name),
        )
        logger.debug(
            "Metadata %s: %dx%d %d-bit %s, %s",
            name,
            width,
            height,
            metadata.bits_per_sample,
            metadata.sample_format,
            metadata.bounding_box,
        )
        return metadata


def _relative_filename(path: Path, data_dir: Path | str | None) -> str:
    """Descriptor filename: relative to data_dir when given, else the name."""
    if data_dir is None:
        return path.name
    try:
        return path.resolve().relative_to(Path(data_dir).resolve()).as_posix()
    except ValueError as e:
        raise ValueError(f"{path.name} is not under the data directory") from e
