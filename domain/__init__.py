"""DEM Tile Metadata Domain Layer.

This package contains the core logic organized by bounded contexts:
- raster: Tile descriptors, schema versions, coverage of queried regions
"""

from domain import raster

__all__ = ["raster"]
