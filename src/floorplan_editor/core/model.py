from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Point:
    """A point in image-space pixels."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        return cls(float(data['x']), float(data['y']))


class RegionType(str, Enum):
    ROOM = 'room'
    HALLWAY = 'hallway'
    OUTDOOR = 'outdoor'
    OTHER = 'other'


@dataclass(frozen=True)
class Dimensions:
    """Bounding box size and polygon area in metres."""

    width: float
    height: float
    area: float

    def to_dict(self) -> Dict[str, float]:
        return {'width': self.width, 'height': self.height, 'area': self.area}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dimensions":
        return cls(float(data['width']), float(data['height']), float(data['area']))


def new_region_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Region:
    id: str
    name: str
    type: RegionType = RegionType.ROOM
    points: List[Point] = field(default_factory=list)
    dimensions: Optional[Dimensions] = None
    # Scale the dimensions were measured at; they go stale when it changes.
    measured_at: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return len(self.points) >= 3

    def compute_dimensions(self, pixels_per_metre: Optional[float]) -> None:
        """Measure the region at the given scale, or clear stale measurements."""
        from .geometry import region_dimensions

        if pixels_per_metre is None or not self.is_complete:
            self.dimensions = None
            self.measured_at = None
            return
        self.dimensions = region_dimensions(self.points, pixels_per_metre)
        self.measured_at = pixels_per_metre

    def has_stale_dimensions(self, pixels_per_metre: Optional[float]) -> bool:
        if self.dimensions is None or self.measured_at is None:
            return False
        return pixels_per_metre is None or abs(self.measured_at - pixels_per_metre) > 1e-9

    def to_dict(self) -> Dict[str, Any]:
        metadata = dict(self.metadata)
        if self.dimensions is not None:
            metadata['dimensions'] = self.dimensions.to_dict()
        if self.measured_at is not None:
            metadata['pixels_per_meter'] = self.measured_at
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'points': [p.to_dict() for p in self.points],
            'metadata': metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        metadata = dict(data.get('metadata') or {})
        dims = metadata.pop('dimensions', None)
        measured_at = metadata.pop('pixels_per_meter', None)
        return cls(
            id=str(data['id']),
            name=str(data.get('name', '')),
            type=RegionType(data.get('type', RegionType.ROOM.value)),
            points=[Point.from_dict(p) for p in data.get('points', [])],
            dimensions=Dimensions.from_dict(dims) if dims else None,
            measured_at=float(measured_at) if measured_at is not None else None,
            metadata=metadata,
        )


@dataclass(frozen=True)
class CropArea:
    """Axis-aligned crop rectangle in image space; width and height are never negative."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CropArea":
        return normalize_crop(
            float(data['x']), float(data['y']), float(data['width']), float(data['height'])
        )


def normalize_crop(x: float, y: float, width: float, height: float) -> CropArea:
    """Build a CropArea, moving the origin when a dimension is negative."""
    if width < 0:
        x += width
        width = -width
    if height < 0:
        y += height
        height = -height
    return CropArea(x, y, width, height)


CALIBRATION_MANUAL = 'manual'


@dataclass
class FloorplanRecord:
    """The persisted aggregate, one per property."""

    property_id: str
    file_path: str
    original_width: int
    original_height: int
    pixels_per_meter: float
    calibration_method: str = CALIBRATION_MANUAL
    regions: List[Region] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def crop_area(self) -> Optional[CropArea]:
        data = self.metadata.get('crop_area')
        return CropArea.from_dict(data) if data else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'property_id': self.property_id,
            'file_path': self.file_path,
            'original_width': self.original_width,
            'original_height': self.original_height,
            'pixels_per_meter': self.pixels_per_meter,
            'calibration_method': self.calibration_method,
            'regions': [r.to_dict() for r in self.regions],
            'metadata': dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FloorplanRecord":
        return cls(
            property_id=str(data['property_id']),
            file_path=str(data['file_path']),
            original_width=int(data.get('original_width', 0)),
            original_height=int(data.get('original_height', 0)),
            pixels_per_meter=float(data['pixels_per_meter']),
            calibration_method=str(data.get('calibration_method', CALIBRATION_MANUAL)),
            regions=[Region.from_dict(r) for r in data.get('regions', [])],
            metadata=dict(data.get('metadata') or {}),
        )
