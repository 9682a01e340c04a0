from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from .model import Dimensions, Point


def round_coordinate(value: float, decimals: int = 2) -> float:
    return round(value, decimals)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def polygon_area(points: Sequence[Point]) -> float:
    """Return the absolute area of a polygon using the shoelace formula."""
    if len(points) < 3:
        return 0.0
    area = 0.0
    n = len(points)
    for i in range(n):
        p1 = points[i]
        p2 = points[(i + 1) % n]
        area += p1.x * p2.y - p2.x * p1.y
    return abs(area) / 2.0


def bounding_box(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y) of a non-empty point sequence."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def region_dimensions(points: Sequence[Point], pixels_per_metre: float) -> Optional[Dimensions]:
    """Convert a polygon's bounding box and area from pixels to metres.

    Returns None for fewer than three points, which cannot enclose an area.
    """
    if len(points) < 3:
        return None
    min_x, min_y, max_x, max_y = bounding_box(points)
    width = (max_x - min_x) / pixels_per_metre
    height = (max_y - min_y) / pixels_per_metre
    area = polygon_area(points) / (pixels_per_metre * pixels_per_metre)
    return Dimensions(
        width=round(width, 2),
        height=round(height, 2),
        area=round(area, 2),
    )


def snap_to_angle(anchor: Point, candidate: Point, threshold: float = 5.0) -> Point:
    """Snap the anchor->candidate direction to horizontal or vertical.

    The snapped point keeps the original distance from the anchor. Angles
    further than ``threshold`` degrees from an axis are returned unchanged.
    """
    dx = candidate.x - anchor.x
    dy = candidate.y - anchor.y
    angle = math.degrees(math.atan2(dy, dx))
    length = math.hypot(dx, dy)

    if abs(angle) < threshold or abs(angle - 180) < threshold or abs(angle + 180) < threshold:
        sign = -1.0 if angle > 90 or angle < -90 else 1.0
        return Point(anchor.x + sign * length, anchor.y)
    if abs(angle - 90) < threshold or abs(angle + 90) < threshold:
        sign = 1.0 if angle > 0 else -1.0
        return Point(anchor.x, anchor.y + sign * length)
    return candidate


def is_near_point(a: Point, b: Point, threshold: float) -> bool:
    """Distance test in image pixels; divide screen thresholds by zoom before calling."""
    return distance(a, b) < threshold


def has_right_angles(p1: Point, p2: Point, p3: Point, threshold: float = 5.0) -> bool:
    angle1 = math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))
    angle2 = math.degrees(math.atan2(p3.y - p2.y, p3.x - p2.x))
    diff = abs(((angle1 - angle2) + 180.0) % 180.0 - 90.0)
    return diff < threshold


def fourth_rectangle_corner(p1: Point, p2: Point, p3: Point) -> Point:
    return Point(p1.x + (p3.x - p2.x), p1.y + (p3.y - p2.y))


def rectangle_from_corners(start: Point, end: Point) -> List[Point]:
    """Closed axis-aligned rectangle through two opposite corners."""
    x0, y0 = round_coordinate(start.x), round_coordinate(start.y)
    x1, y1 = round_coordinate(end.x), round_coordinate(end.y)
    return [
        Point(x0, y0),
        Point(x0, y1),
        Point(x1, y1),
        Point(x1, y0),
        Point(x0, y0),
    ]


def label_anchor(points: Sequence[Point]) -> Optional[Point]:
    """Vertex mean used to centre a region's label."""
    if not points:
        return None
    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)
