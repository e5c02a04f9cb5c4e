"""Infrastructure Layer.

File I/O and third-party integrations (GDAL via rasterio, JSON persistence)
behind the ports defined in domain.
"""
