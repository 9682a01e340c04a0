"""Draw commands produced by the renderer and executed by a drawing backend.

Coordinates are in the space set up by the enclosing PushTransform (image
space inside the viewport transform, canvas pixels outside it). Widths,
radii and font sizes are in the same units, so the renderer divides them by
zoom to keep them constant on screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..core.model import CropArea, Point

Color = Tuple[int, int, int, int]


def rgba(r: int, g: int, b: int, a: float = 1.0) -> Color:
    return (r, g, b, int(round(a * 255)))


def hex_color(value: str, a: float = 1.0) -> Color:
    value = value.lstrip('#')
    return rgba(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), a)


@dataclass(frozen=True)
class Checkerboard:
    width: float
    height: float
    cell: float
    colors: Tuple[Color, Color]


@dataclass(frozen=True)
class PushTransform:
    zoom: float
    pan: Point


@dataclass(frozen=True)
class PopTransform:
    pass


@dataclass(frozen=True)
class DrawImage:
    width: int
    height: int


@dataclass(frozen=True)
class PunchedOverlay:
    """Fill ``outer`` except for ``hole``."""

    outer: CropArea
    hole: Optional[CropArea]
    fill: Color


@dataclass(frozen=True)
class StrokeRect:
    rect: CropArea
    color: Color
    width: float


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    fill: Optional[Color]
    outline: Optional[Color] = None
    width: float = 0.0


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Point, ...]
    fill: Optional[Color]
    outline: Optional[Color]
    width: float


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    color: Color
    width: float
    dash: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class FillRect:
    rect: CropArea
    fill: Color


@dataclass(frozen=True)
class Text:
    position: Point
    text: str
    size: float
    color: Color


@dataclass(frozen=True)
class BeginClip:
    rect: CropArea


@dataclass(frozen=True)
class EndClip:
    pass


DrawCommand = Union[
    Checkerboard,
    PushTransform,
    PopTransform,
    DrawImage,
    PunchedOverlay,
    StrokeRect,
    Circle,
    Polygon,
    Polyline,
    FillRect,
    Text,
    BeginClip,
    EndClip,
]
