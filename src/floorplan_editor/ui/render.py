from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..core.config import EditorConfig
from ..core.geometry import distance, label_anchor, rectangle_from_corners
from ..core.model import CropArea, Point, Region
from ..core.state import DrawingMode, EditorMode, EditorState
from ..core.transform import Viewport
from ..features.crop.crop import handle_positions
from ..features.editing.draw import preview_segment
from .commands import (
    BeginClip,
    Checkerboard,
    Circle,
    DrawCommand,
    DrawImage,
    EndClip,
    FillRect,
    PopTransform,
    Polygon,
    Polyline,
    PunchedOverlay,
    PushTransform,
    StrokeRect,
    Text,
    hex_color,
    rgba,
)

if TYPE_CHECKING:
    from ..editor import FloorplanEditor

# ---------- Visual Style Configuration ----------
CHECKER_COLORS = (hex_color('#f0f0f0'), hex_color('#ffffff'))

CROP_SHADE = rgba(0, 0, 0, 0.5)
CROP_BORDER = hex_color('#2563eb')
CROP_HANDLE_FILL = hex_color('#ffffff')
CROP_HANDLE_RADIUS = 8

CALIBRATION_COLOR = rgba(255, 0, 0)
CALIBRATION_MARKER_RADIUS = 5
CALIBRATION_LABEL_BG = rgba(255, 255, 255)
CALIBRATION_PREVIEW = rgba(0, 0, 255, 0.8)

REGION_FILL = rgba(0, 128, 255, 0.2)
REGION_STROKE = rgba(0, 128, 255, 0.8)
REGION_TEXT = rgba(0, 0, 0)
LINE_WIDTH = 2
NAME_FONT_SIZE = 14
DIMENSION_FONT_SIZE = 12

START_MARKER_RADIUS = 5
START_MARKER_CLOSING = rgba(0, 255, 0, 0.8)
PREVIEW_CLOSING = rgba(0, 255, 0, 0.8)
PREVIEW_OPEN = rgba(0, 128, 255, 0.4)
PREVIEW_DASH = 5


@dataclass
class RenderScene:
    """Saved floorplan geometry, as drawn by the read-only viewer."""

    image_size: Tuple[int, int]
    regions: List[Region] = field(default_factory=list)
    crop_area: Optional[CropArea] = None
    pixels_per_metre: Optional[float] = None


def format_metres(value: float) -> str:
    return ('%.2f' % value).rstrip('0').rstrip('.')


def _region_commands(regions: Sequence[Region], pixels_per_metre: Optional[float], zoom: float) -> List[DrawCommand]:
    cmds: List[DrawCommand] = []
    for region in regions:
        if len(region.points) < 2:
            continue
        points = tuple(region.points)
        if len(points) > 2:
            cmds.append(Polygon(points, REGION_FILL, REGION_STROKE, LINE_WIDTH / zoom))
        else:
            cmds.append(Polyline(points, REGION_STROKE, LINE_WIDTH / zoom))

        centre = label_anchor(points)
        cmds.append(Text(centre, region.name, NAME_FONT_SIZE / zoom, REGION_TEXT))
        dims = region.dimensions
        if pixels_per_metre and dims is not None and region.is_complete:
            cmds.append(Text(
                Point(centre.x, centre.y + 20 / zoom),
                f"{format_metres(dims.width)}m × {format_metres(dims.height)}m",
                DIMENSION_FONT_SIZE / zoom,
                REGION_TEXT,
            ))
            cmds.append(Text(
                Point(centre.x, centre.y + 40 / zoom),
                f"Area: {format_metres(dims.area)}m²",
                DIMENSION_FONT_SIZE / zoom,
                REGION_TEXT,
            ))
    return cmds


def _crop_commands(image_size: Tuple[int, int], crop: Optional[CropArea], zoom: float) -> List[DrawCommand]:
    img_w, img_h = image_size
    cmds: List[DrawCommand] = [PunchedOverlay(CropArea(0, 0, img_w, img_h), crop, CROP_SHADE)]
    if crop is None:
        return cmds
    cmds.append(StrokeRect(crop, CROP_BORDER, LINE_WIDTH / zoom))
    for pos in handle_positions(crop).values():
        cmds.append(Circle(pos, CROP_HANDLE_RADIUS / zoom, CROP_HANDLE_FILL, CROP_BORDER, LINE_WIDTH / zoom))
    return cmds


def _calibration_commands(
    points: Sequence[Point],
    pixels_per_metre: Optional[float],
    zoom: float,
    pointer: Optional[Point],
) -> List[DrawCommand]:
    cmds: List[DrawCommand] = []
    if len(points) == 1 and pointer is not None:
        dash = (PREVIEW_DASH / zoom, PREVIEW_DASH / zoom)
        cmds.append(Polyline((points[0], pointer), CALIBRATION_PREVIEW, LINE_WIDTH / zoom, dash))
    for index, point in enumerate(points):
        cmds.append(Circle(point, CALIBRATION_MARKER_RADIUS / zoom, CALIBRATION_COLOR))
        if index == 0:
            continue
        prev = points[index - 1]
        cmds.append(Polyline((prev, point), CALIBRATION_COLOR, LINE_WIDTH / zoom))
        if pixels_per_metre:
            metres = distance(prev, point) / pixels_per_metre
            mid = Point((prev.x + point.x) / 2, (prev.y + point.y) / 2)
            padding = 10 / zoom
            cmds.append(FillRect(CropArea(mid.x - 40 / zoom, mid.y - padding, 80 / zoom, padding * 2),
                                 CALIBRATION_LABEL_BG))
            cmds.append(Text(Point(mid.x, mid.y + 5 / zoom), f"{metres:.2f}m",
                             NAME_FONT_SIZE / zoom, CALIBRATION_COLOR))
    return cmds


def _trace_commands(
    state: EditorState,
    zoom: float,
    config: EditorConfig,
    pointer: Optional[Point],
) -> List[DrawCommand]:
    draw = state.draw
    region = draw.current_region
    if region is None or not region.points:
        return []
    cmds: List[DrawCommand] = []
    points = tuple(region.points)
    width = LINE_WIDTH / zoom
    dash = (PREVIEW_DASH / zoom, PREVIEW_DASH / zoom)
    if len(points) >= 2:
        cmds.append(Polyline(points, REGION_STROKE, width))

    closing = False
    if pointer is not None:
        if draw.sub_mode is DrawingMode.RECTANGLE and draw.rectangle_anchor is not None:
            outline = tuple(rectangle_from_corners(draw.rectangle_anchor, pointer))
            cmds.append(Polyline(outline, PREVIEW_OPEN, width, dash))
        else:
            segment = preview_segment(
                points, pointer, config.close_threshold_px / zoom, config.snap_threshold_deg
            )
            if segment is not None:
                target, closing = segment
                color = PREVIEW_CLOSING if closing else PREVIEW_OPEN
                cmds.append(Polyline((points[-1], target), color, width, dash))

    marker = START_MARKER_CLOSING if closing else REGION_STROKE
    cmds.append(Circle(points[0], START_MARKER_RADIUS / zoom, marker))
    return cmds


def render(
    state: EditorState,
    viewport: Viewport,
    image_size: Optional[Tuple[int, int]],
    canvas_size: Tuple[int, int],
    config: Optional[EditorConfig] = None,
) -> List[DrawCommand]:
    """Describe the whole editor canvas, back to front, as draw commands."""
    config = config or EditorConfig()
    view_w, view_h = canvas_size
    cmds: List[DrawCommand] = [Checkerboard(view_w, view_h, config.checker_cell_px, CHECKER_COLORS)]
    if image_size is None:
        return cmds

    zoom = viewport.zoom
    cmds.append(PushTransform(zoom, viewport.pan))
    cmds.append(DrawImage(*image_size))

    mode = state.mode.current
    if mode is EditorMode.PAN:
        mode = state.mode.previous

    if mode is EditorMode.CROP:
        cmds.extend(_crop_commands(image_size, state.crop_area, zoom))
    else:
        crop = state.crop_area
        if crop is not None:
            cmds.append(BeginClip(crop))
        # No pointer previews while panning.
        pointer = None if state.mode.current is EditorMode.PAN else state.pointer
        scale_pointer = pointer if mode is EditorMode.SCALE else None
        cmds.extend(_calibration_commands(state.scale.points, state.pixels_per_metre, zoom, scale_pointer))
        cmds.extend(_region_commands(state.regions, state.pixels_per_metre, zoom))
        cmds.extend(_trace_commands(state, zoom, config, pointer))
        if crop is not None:
            cmds.append(EndClip())

    cmds.append(PopTransform())
    return cmds


def render_editor(editor: "FloorplanEditor") -> List[DrawCommand]:
    return render(editor.state, editor.viewport, editor.image_size, editor.canvas_size, editor.config)


def render_readonly(scene: RenderScene, viewport: Viewport) -> List[DrawCommand]:
    """Image plus saved regions with no interaction overlays."""
    zoom = viewport.zoom
    cmds: List[DrawCommand] = [PushTransform(zoom, viewport.pan), DrawImage(*scene.image_size)]
    if scene.crop_area is not None:
        cmds.append(BeginClip(scene.crop_area))
    cmds.extend(_region_commands(scene.regions, scene.pixels_per_metre, zoom))
    if scene.crop_area is not None:
        cmds.append(EndClip())
    cmds.append(PopTransform())
    return cmds
