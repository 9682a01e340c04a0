from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .model import Point

ZOOM_MIN = 0.1
ZOOM_MAX = 5.0


@dataclass(frozen=True)
class Viewport:
    """Pan and zoom mapping image space to screen space: screen = image * zoom + pan."""

    zoom: float = 1.0
    pan: Point = Point(0.0, 0.0)


def clamp_zoom(zoom: float, zoom_min: float = ZOOM_MIN, zoom_max: float = ZOOM_MAX) -> float:
    return max(zoom_min, min(zoom, zoom_max))


def to_image_space(screen_point: Point, viewport: Viewport) -> Point:
    return Point(
        (screen_point.x - viewport.pan.x) / viewport.zoom,
        (screen_point.y - viewport.pan.y) / viewport.zoom,
    )


def to_screen_space(image_point: Point, viewport: Viewport) -> Point:
    return Point(
        image_point.x * viewport.zoom + viewport.pan.x,
        image_point.y * viewport.zoom + viewport.pan.y,
    )


def zoom_at(
    viewport: Viewport,
    screen_point: Point,
    zoom: float,
    zoom_min: float = ZOOM_MIN,
    zoom_max: float = ZOOM_MAX,
) -> Viewport:
    """Set a new zoom while keeping the image point under ``screen_point`` in place."""
    anchor = to_image_space(screen_point, viewport)
    new_zoom = clamp_zoom(zoom, zoom_min, zoom_max)
    pan = Point(screen_point.x - anchor.x * new_zoom, screen_point.y - anchor.y * new_zoom)
    return Viewport(zoom=new_zoom, pan=pan)


def pan_by(viewport: Viewport, dx: float, dy: float) -> Viewport:
    return Viewport(zoom=viewport.zoom, pan=Point(viewport.pan.x + dx, viewport.pan.y + dy))


def fit_viewport(
    image_size: Tuple[int, int],
    canvas_size: Tuple[int, int],
    padding: float = 40.0,
    zoom_min: float = ZOOM_MIN,
    zoom_max: float = ZOOM_MAX,
) -> Viewport:
    """Zoom and centre the image inside the canvas, leaving ``padding`` on every side."""
    img_w, img_h = image_size
    view_w, view_h = canvas_size
    if img_w <= 0 or img_h <= 0:
        return Viewport()
    scale_x = (view_w - padding * 2) / img_w
    scale_y = (view_h - padding * 2) / img_h
    zoom = clamp_zoom(min(scale_x, scale_y), zoom_min, zoom_max)
    pan = Point((view_w - img_w * zoom) / 2, (view_h - img_h * zoom) / 2)
    return Viewport(zoom=zoom, pan=pan)
