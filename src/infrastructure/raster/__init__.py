"""Infrastructure adapters for the raster bounded context.

This module provides the infrastructure layer implementations for tile
metadata: extraction from raster headers, JSON persistence and index builds.
"""

from .index_builder import IndexBuildReport, build_metadata_index
from .metadata_store import JsonMetadataStore, dump_metadata, load_metadata
from .rasterio_metadata_adapter import RasterioMetadataAdapter

__all__ = [
    "IndexBuildReport",
    "JsonMetadataStore",
    "RasterioMetadataAdapter",
    "build_metadata_index",
    "dump_metadata",
    "load_metadata",
]
