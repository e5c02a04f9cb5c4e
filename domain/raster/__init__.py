"""Raster Bounded Context.

Responsible for describing DEM tile files without decoding them:
- Value Objects: BoundingBox, TileKey, DEMFileDefinition
- Entities: FileMetadata (tile descriptor, real or virtual)
- Services: deduplication, coverage queries, gap filling
"""
