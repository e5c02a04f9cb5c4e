"""Raster Bounded Context - Tile descriptor.

FileMetadata describes one elevation raster file well enough to place it in a
spatial index without opening it: geometric placement, sample layout, no-data
sentinel and the schema version it was generated with.
"""

from __future__ import annotations

import math
import threading
import uuid
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from domain.raster.errors import NoDataValueParseError
from domain.raster.formats import DEMFileDefinition
from domain.raster.value_objects import BoundingBox, TileKey
from domain.raster.versioning import FILEMETADATA_VERSION, is_current_version

# Guards the first parse of a no-data value. Parsing is cheap, a single lock
# for all descriptors is enough.
_NO_DATA_LOCK = threading.Lock()

VIRTUAL_FILENAME_PREFIX = "virtual_"


def new_virtual_filename() -> str:
    """Return a unique synthetic file name for a virtual descriptor."""
    return f"{VIRTUAL_FILENAME_PREFIX}{uuid.uuid4()}"


def _persisted(tag: int, default: Any) -> Any:
    return Field(default=default, json_schema_extra={"tag": tag})


def _parse_no_data(text: str) -> float:
    # Typographic minus shows up in hand-edited headers
    try:
        return float(text.strip().replace("\u2212", "-"))
    except ValueError as e:
        raise NoDataValueParseError(text) from e


class FileMetadata(BaseModel):
    """Descriptor of a single DEM tile file (Entity).

    Fields are declared in persisted-tag order; the tag numbers are part of
    the stored format and never change for a given schema version. Tag 1 is
    reserved.

    Construction:
        - Index build: FileMetadata(filename=..., file_format=..., ...) or
          FileMetadata.create(filename, file_format). version defaults to
          FILEMETADATA_VERSION.
        - Deserialization: FileMetadata.model_validate(...). Absent fields stay
          at zero/empty, version included, and file_format at None.
          model_validate does not run __init__, so an unversioned record is
          never mistaken for a current one.
        No field validation is done; callers supply consistent geometry.

    Derived values:
        bounding_box: normalized data-space extent, computed once at
            construction. The record is frozen, so it never goes stale.
        no_data_value_as_number(): parsed from no_data_value on first call,
            cached afterwards.

    Identity:
        Two descriptors are equal when their tile keys (file base names) are
        equal, whatever their directory or other fields. See TileKey.

    Attributes:
        filename: Path of the raster relative to the data directory, or a
            synthetic name for virtual descriptors
        pixel_scale_x, pixel_scale_y: Scale factors used for transform math
        pixel_size_x, pixel_size_y: Effective ground size of a pixel. Kept
            apart from the scale factors; their exact difference is not
            documented by the producers of older indexes.
        data_start_*, data_end_*: Extent of the sampled data, in either order
        physical_start_*, physical_end_*: Extent of the physical image, may
            differ from the data extent by up to one pixel for grid
            registered rasters
        no_data_value: No-data sentinel as text, rasters encode it in
            varied numeric formats
    """

    version: str = _persisted(2, "")
    filename: str = _persisted(3, "")
    height: int = _persisted(4, 0)
    width: int = _persisted(5, 0)
    pixel_scale_x: float = _persisted(6, 0.0)
    pixel_scale_y: float = _persisted(7, 0.0)
    data_start_lat: float = _persisted(8, 0.0)
    data_start_lon: float = _persisted(9, 0.0)
    data_end_lat: float = _persisted(10, 0.0)
    data_end_lon: float = _persisted(11, 0.0)
    bits_per_sample: int = _persisted(12, 0)
    world_units: str = _persisted(13, "")
    sample_format: str = _persisted(14, "")
    no_data_value: str = _persisted(15, "")
    scanline_size: int = _persisted(16, 0)
    physical_start_lon: float = _persisted(17, 0.0)
    physical_start_lat: float = _persisted(18, 0.0)
    physical_end_lon: float = _persisted(19, 0.0)
    physical_end_lat: float = _persisted(20, 0.0)
    pixel_size_x: float = _persisted(21, 0.0)
    pixel_size_y: float = _persisted(22, 0.0)
    file_format: DEMFileDefinition | None = _persisted(23, None)
    minimum_altitude: float = _persisted(24, 0.0)
    maximum_altitude: float = _persisted(25, 0.0)

    # Not persisted: derived or synthetic state
    _bounding_box: BoundingBox = PrivateAttr()
    _tile_key: TileKey = PrivateAttr()
    _virtual: bool = PrivateAttr(default=False)
    _no_data_number: float = PrivateAttr(default=math.nan)
    _no_data_set: bool = PrivateAttr(default=False)

    # NaN altitudes (all no-data bands) must survive a JSON round trip
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    def __init__(self, **data: Any) -> None:
        data.setdefault("version", FILEMETADATA_VERSION)
        super().__init__(**data)

    def model_post_init(self, __context: Any) -> None:
        self._tile_key = TileKey.from_filename(self.filename)
        # model_construct: malformed extrema (NaN) still yield a box
        self._bounding_box = BoundingBox.model_construct(
            min_x=min(self.data_start_lon, self.data_end_lon),
            max_x=max(self.data_start_lon, self.data_end_lon),
            min_y=min(self.data_start_lat, self.data_end_lat),
            max_y=max(self.data_start_lat, self.data_end_lat),
        )

    @classmethod
    def create(
        cls,
        filename: str,
        file_format: DEMFileDefinition,
        version: str = FILEMETADATA_VERSION,
        **layout: Any,
    ) -> "FileMetadata":
        """Build metadata for a real raster file."""
        return cls(
            filename=filename, file_format=file_format, version=version, **layout
        )

    # -----------------------------------------------------------------------
    # Derived geometry
    # -----------------------------------------------------------------------
    @property
    def bounding_box(self) -> BoundingBox:
        """Normalized extent of the data-space extrema (min <= max)."""
        return self._bounding_box

    # -----------------------------------------------------------------------
    # Identity
    # -----------------------------------------------------------------------
    @property
    def tile_key(self) -> TileKey:
        return self._tile_key

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        if not isinstance(other, FileMetadata):
            return NotImplemented
        return self._tile_key == other._tile_key

    def __hash__(self) -> int:
        return hash(self._tile_key)

    # -----------------------------------------------------------------------
    # No-data sentinel
    # -----------------------------------------------------------------------
    def no_data_value_as_number(self) -> float:
        """Return no_data_value as a float, parsing it on first call only.

        Raises:
            NoDataValueParseError: If the text is not numeric
        """
        if not self._no_data_set:
            with _NO_DATA_LOCK:
                if not self._no_data_set:
                    self._no_data_number = _parse_no_data(self.no_data_value)
                    self._no_data_set = True
        return self._no_data_number

    def override_no_data_value(self, value: float) -> None:
        """Set the numeric no-data value directly, without parsing."""
        with _NO_DATA_LOCK:
            self._no_data_number = float(value)
            self._no_data_set = True

    # -----------------------------------------------------------------------
    # Versioning
    # -----------------------------------------------------------------------
    @property
    def is_current_version(self) -> bool:
        return is_current_version(self.version)

    # -----------------------------------------------------------------------
    # Virtual descriptors
    # -----------------------------------------------------------------------
    @property
    def virtual_metadata(self) -> bool:
        """True for synthetic descriptors with no backing file.

        Virtual descriptors stand in for tiles missing from a queried region
        so that heightmap assembly gets a descriptor for every grid cell.
        """
        return self._virtual

    def clone_as_virtual(
        self, filename_factory: Callable[[], str] = new_virtual_filename
    ) -> "FileMetadata":
        """Copy this descriptor as a virtual one with a fresh identity.

        All persisted fields are copied except filename, which comes from
        filename_factory. The bounding box is recomputed for the copy (equal
        value, distinct object).
        """
        clone = self._copy_with(filename=filename_factory())
        clone._virtual = True
        return clone

    def translated(self, d_lon: float, d_lat: float) -> "FileMetadata":
        """Copy with data and physical extrema shifted by (d_lon, d_lat)."""
        moved = self._copy_with(
            data_start_lon=self.data_start_lon + d_lon,
            data_end_lon=self.data_end_lon + d_lon,
            data_start_lat=self.data_start_lat + d_lat,
            data_end_lat=self.data_end_lat + d_lat,
            physical_start_lon=self.physical_start_lon + d_lon,
            physical_end_lon=self.physical_end_lon + d_lon,
            physical_start_lat=self.physical_start_lat + d_lat,
            physical_end_lat=self.physical_end_lat + d_lat,
        )
        moved._virtual = self._virtual
        return moved

    def _copy_with(self, **changes: Any) -> "FileMetadata":
        fields = {name: getattr(self, name) for name in type(self).model_fields}
        fields.update(changes)
        copy = type(self)(**fields)
        if self._no_data_set:
            copy._no_data_number = self._no_data_number
            copy._no_data_set = True
        return copy

    def __str__(self) -> str:
        return f"{self._tile_key.name}: {self._bounding_box}"


# Persisted field name -> stable tag number
PERSISTED_FIELD_TAGS: dict[str, int] = {
    name: field.json_schema_extra["tag"]  # type: ignore[index]
    for name, field in FileMetadata.model_fields.items()
}
