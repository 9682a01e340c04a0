from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ...core.geometry import (
    fourth_rectangle_corner,
    has_right_angles,
    is_near_point,
    rectangle_from_corners,
    snap_to_angle,
)
from ...core.model import Point, Region, RegionType, new_region_id
from ...core.state import DrawingMode

if TYPE_CHECKING:
    from ...editor import FloorplanEditor

logger = logging.getLogger(__name__)


def close_threshold(editor: "FloorplanEditor") -> float:
    """Closing distance in image pixels; constant on screen at any zoom."""
    return editor.config.close_threshold_px / editor.viewport.zoom


def _new_region(editor: "FloorplanEditor", prefix: str, first: Point) -> Region:
    return Region(
        id=new_region_id(),
        name=f"{prefix} {len(editor.state.regions) + 1}",
        type=RegionType.ROOM,
        points=[first],
    )


def _complete(editor: "FloorplanEditor", region: Region, points: List[Point]) -> Region:
    region.points = points
    region.compute_dimensions(editor.state.pixels_per_metre)
    editor.state.regions.append(region)
    editor.state.draw.clear()
    logger.debug("Completed region %s with %d points", region.name, len(points))
    return region


def closing_in_range(points: Sequence[Point], pointer: Point, threshold: float) -> bool:
    return len(points) >= 3 and is_near_point(pointer, points[0], threshold)


def preview_segment(
    points: Sequence[Point],
    pointer: Point,
    threshold: float,
    snap_threshold: float,
) -> Optional[Tuple[Point, bool]]:
    """End of the preview segment from the last point, and whether it closes the trace.

    In closing range the segment runs to the first point; otherwise to the
    angle-snapped pointer position.
    """
    if not points:
        return None
    if closing_in_range(points, pointer, threshold):
        return points[0], True
    return snap_to_angle(points[-1], pointer, snap_threshold), False


def is_closing(editor: "FloorplanEditor", point: Point) -> bool:
    region = editor.state.draw.current_region
    if region is None:
        return False
    return closing_in_range(region.points, point, close_threshold(editor))


def preview_target(editor: "FloorplanEditor", point: Point) -> Optional[Point]:
    region = editor.state.draw.current_region
    if region is None:
        return None
    segment = preview_segment(
        region.points, point, close_threshold(editor), editor.config.snap_threshold_deg
    )
    return segment[0] if segment else None


def draw_on_canvas_click(editor: "FloorplanEditor", point: Point) -> bool:
    """Handle a primary click in region mode. Return True if handled."""
    if editor.state.draw.sub_mode is DrawingMode.RECTANGLE:
        return _rectangle_click(editor, point)
    return _freeform_click(editor, point)


def _freeform_click(editor: "FloorplanEditor", point: Point) -> bool:
    draw = editor.state.draw
    region = draw.current_region
    if region is None:
        draw.current_region = _new_region(editor, "Region", point)
        return True

    first = region.points[0]
    if is_closing(editor, point):
        final_points = list(region.points)
        if len(region.points) == 3 and has_right_angles(
            region.points[0],
            region.points[1],
            region.points[2],
            editor.config.right_angle_threshold_deg,
        ):
            final_points.append(fourth_rectangle_corner(*region.points))
        else:
            final_points.append(first)
        _complete(editor, region, final_points)
        return True

    snapped = snap_to_angle(region.points[-1], point, editor.config.snap_threshold_deg)
    region.points.append(snapped)
    return True


def _rectangle_click(editor: "FloorplanEditor", point: Point) -> bool:
    draw = editor.state.draw
    if draw.rectangle_anchor is None or draw.current_region is None:
        draw.rectangle_anchor = point
        draw.current_region = _new_region(editor, "Room", point)
        return True
    anchor = draw.rectangle_anchor
    if anchor.x == point.x or anchor.y == point.y:
        # Zero-width or zero-height rectangle; keep waiting for the second corner.
        return False
    _complete(editor, draw.current_region, rectangle_from_corners(anchor, point))
    return True


def force_complete(editor: "FloorplanEditor") -> Optional[Region]:
    """Complete the current trace with the points collected so far."""
    region = editor.state.draw.current_region
    if region is None:
        return None
    return _complete(editor, region, list(region.points))


def toggle_drawing_mode(editor: "FloorplanEditor") -> DrawingMode:
    draw = editor.state.draw
    if draw.sub_mode is DrawingMode.FREEFORM:
        draw.sub_mode = DrawingMode.RECTANGLE
    else:
        draw.sub_mode = DrawingMode.FREEFORM
    draw.clear()
    editor.redraw()
    return draw.sub_mode


def cancel_trace(editor: "FloorplanEditor") -> None:
    editor.state.draw.clear()
    editor.redraw()


def undo_last_point(editor: "FloorplanEditor") -> None:
    """Remove the last traced point; abandon the trace when at most one point is left."""
    draw = editor.state.draw
    region = draw.current_region
    if region is None:
        return
    if draw.rectangle_anchor is not None or len(region.points) <= 2:
        draw.clear()
    else:
        region.points.pop()
    editor.redraw()
