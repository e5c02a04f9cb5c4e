"""Root pytest configuration for all tests.

Provides descriptor factories shared by domain and infrastructure tests.
Domain tests construct FileMetadata directly, no rasters are opened.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from domain.raster.file_metadata import FileMetadata
from domain.raster.formats import SRTM_HGT


def make_tile(
    filename: str = "N45E005.hgt",
    lon: float = 5.0,
    lat: float = 45.0,
    size: float = 1.0,
    **overrides: Any,
) -> FileMetadata:
    """Create an SRTM-like descriptor with its south-west corner at (lon, lat).

    Data extrema are given north-to-south like a north-up raster
    (data_start_lat > data_end_lat).
    """
    fields: dict[str, Any] = {
        "height": 3600,
        "width": 3600,
        "pixel_scale_x": size / 3600,
        "pixel_scale_y": -size / 3600,
        "pixel_size_x": size / 3600,
        "pixel_size_y": size / 3600,
        "data_start_lat": lat + size,
        "data_start_lon": lon,
        "data_end_lat": lat,
        "data_end_lon": lon + size,
        "physical_start_lat": lat + size + size / 7200,
        "physical_start_lon": lon - size / 7200,
        "physical_end_lat": lat - size / 7200,
        "physical_end_lon": lon + size + size / 7200,
        "bits_per_sample": 16,
        "world_units": "degree",
        "sample_format": "INT",
        "no_data_value": "-32768",
        "scanline_size": 7200,
        "minimum_altitude": 120.0,
        "maximum_altitude": 4808.0,
    }
    fields.update(overrides)
    return FileMetadata.create(filename, SRTM_HGT, **fields)


@pytest.fixture
def tile_factory() -> Callable[..., FileMetadata]:
    """Factory fixture, see make_tile for parameters."""
    return make_tile


@pytest.fixture
def srtm_metadata() -> FileMetadata:
    """Descriptor of a 1x1 degree SRTM tile covering lon [5, 6], lat [45, 46]."""
    return FileMetadata.create(
        "SRTM_GL3/N45E005.hgt",
        SRTM_HGT,
        height=3600,
        width=3600,
        data_start_lat=45.0,
        data_end_lat=46.0,
        data_start_lon=5.0,
        data_end_lon=6.0,
        pixel_scale_x=1 / 3600,
        pixel_scale_y=-1 / 3600,
        pixel_size_x=1 / 3600,
        pixel_size_y=1 / 3600,
        bits_per_sample=16,
        world_units="degree",
        sample_format="INT",
        no_data_value="-32768",
        scanline_size=7200,
        physical_start_lat=44.99986111111111,
        physical_start_lon=4.99986111111111,
        physical_end_lat=46.00013888888889,
        physical_end_lon=6.00013888888889,
        minimum_altitude=212.0,
        maximum_altitude=4102.0,
    )
