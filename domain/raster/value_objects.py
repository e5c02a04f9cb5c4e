"""Raster Bounded Context - Value Objects.

Immutable geometry and identity types used by tile descriptors.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

from pathlib import PureWindowsPath

from pydantic import BaseModel, ConfigDict, model_validator


class BoundingBox(BaseModel):
    """Geographic extent of a tile or query (Value Object).

    Only the ordering invariant is enforced: min <= max on both axes.
    Degenerate boxes (a line or a single point) are valid. Coordinates are
    not range-checked, descriptors may carry projected or malformed
    geometry and must still produce a box.
    """

    min_x: float  # Western boundary (longitude)
    min_y: float  # Southern boundary (latitude)
    max_x: float  # Eastern boundary (longitude)
    max_y: float  # Northern boundary (latitude)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoundingBox":
        if not (self.min_x <= self.max_x):
            raise ValueError(
                f"Invalid x ordering: min_x={self.min_x} > max_x={self.max_x}"
            )
        if not (self.min_y <= self.max_y):
            raise ValueError(
                f"Invalid y ordering: min_y={self.min_y} > max_y={self.max_y}"
            )
        return self

    @classmethod
    def from_extents(
        cls, x_min: float, x_max: float, y_min: float, y_max: float
    ) -> "BoundingBox":
        """Build from (minLon, maxLon, minLat, maxLat)."""
        return cls(min_x=x_min, min_y=y_min, max_x=x_max, max_y=y_max)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def is_degenerate(self) -> bool:
        """True when the box has no area."""
        return self.width == 0 or self.height == 0

    def center(self) -> tuple[float, float]:
        """Return (x, y) of the box centre."""
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def intersects(self, other: "BoundingBox") -> bool:
        """Check for positive-area overlap. Touching edges do not count."""
        return (
            self.min_x < other.max_x
            and other.min_x < self.max_x
            and self.min_y < other.max_y
            and other.min_y < self.max_y
        )

    def contains_point(self, x: float, y: float) -> bool:
        """Check if (x, y) is within the box (inclusive)."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def contains(self, other: "BoundingBox") -> bool:
        """Check if other lies entirely within this box (inclusive)."""
        return (
            self.min_x <= other.min_x
            and other.max_x <= self.max_x
            and self.min_y <= other.min_y
            and other.max_y <= self.max_y
        )

    def __str__(self) -> str:
        return (
            f"lon: [{self.min_x}, {self.max_x}], lat: [{self.min_y}, {self.max_y}]"
        )


class TileKey(BaseModel):
    """Identity key of a tile descriptor (Value Object).

    The key is the final path component of the descriptor file name, so
    "a/N45E005.hgt" and "b/N45E005.hgt" share a key. This is the long-standing
    identity rule of the metadata index and is kept as-is; use
    services.index_by_key to detect such collisions.

    Keys compare case-sensitively on every platform.
    """

    name: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_filename(cls, filename: str) -> "TileKey":
        # PureWindowsPath splits on both "/" and "\", file names may have
        # been persisted on either platform.
        return cls(name=PureWindowsPath(filename).name)

    def __str__(self) -> str:
        return self.name
