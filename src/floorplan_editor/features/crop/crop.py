from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Tuple

from ...core.model import CropArea, Point, normalize_crop
from ...core.state import EditorMode, HandleType, NoticeLevel

if TYPE_CHECKING:
    from ...editor import FloorplanEditor


# Handle that takes over when a drag flips the rectangle horizontally / vertically.
_FLIP_X: Dict[HandleType, HandleType] = {
    HandleType.NW: HandleType.NE,
    HandleType.NE: HandleType.NW,
    HandleType.W: HandleType.E,
    HandleType.E: HandleType.W,
    HandleType.SW: HandleType.SE,
    HandleType.SE: HandleType.SW,
    HandleType.N: HandleType.N,
    HandleType.S: HandleType.S,
}
_FLIP_Y: Dict[HandleType, HandleType] = {
    HandleType.NW: HandleType.SW,
    HandleType.SW: HandleType.NW,
    HandleType.N: HandleType.S,
    HandleType.S: HandleType.N,
    HandleType.NE: HandleType.SE,
    HandleType.SE: HandleType.NE,
    HandleType.W: HandleType.W,
    HandleType.E: HandleType.E,
}


def handle_positions(crop: CropArea) -> Dict[HandleType, Point]:
    mid_x = crop.x + crop.width / 2
    mid_y = crop.y + crop.height / 2
    return {
        HandleType.NW: Point(crop.x, crop.y),
        HandleType.N: Point(mid_x, crop.y),
        HandleType.NE: Point(crop.right, crop.y),
        HandleType.E: Point(crop.right, mid_y),
        HandleType.SE: Point(crop.right, crop.bottom),
        HandleType.S: Point(mid_x, crop.bottom),
        HandleType.SW: Point(crop.x, crop.bottom),
        HandleType.W: Point(crop.x, mid_y),
    }


def handle_at_point(crop: CropArea, point: Point, radius: float) -> Optional[HandleType]:
    """Return the handle whose square hit box of half-size ``radius`` contains ``point``."""
    for handle, pos in handle_positions(crop).items():
        if abs(point.x - pos.x) < radius and abs(point.y - pos.y) < radius:
            return handle
    return None


def crop_from_corners(anchor: Point, current: Point) -> CropArea:
    return normalize_crop(anchor.x, anchor.y, current.x - anchor.x, current.y - anchor.y)


def resize_crop(crop: CropArea, handle: HandleType, point: Point) -> Tuple[CropArea, HandleType]:
    """Move the edges owned by ``handle`` to ``point``.

    Returns the normalised crop and the handle now under the pointer, which
    differs from ``handle`` when the drag crossed the opposite edge.
    """
    x, y, w, h = crop.x, crop.y, crop.width, crop.height
    if handle in (HandleType.NW, HandleType.W, HandleType.SW):
        w += x - point.x
        x = point.x
    if handle in (HandleType.NE, HandleType.E, HandleType.SE):
        w = point.x - x
    if handle in (HandleType.NW, HandleType.N, HandleType.NE):
        h += y - point.y
        y = point.y
    if handle in (HandleType.SW, HandleType.S, HandleType.SE):
        h = point.y - y

    if w < 0:
        handle = _FLIP_X[handle]
    if h < 0:
        handle = _FLIP_Y[handle]
    return normalize_crop(x, y, w, h), handle


def crop_on_pointer_down(editor: "FloorplanEditor", point: Point) -> bool:
    state = editor.state
    if state.crop_area is not None:
        radius = editor.config.handle_radius_px / editor.viewport.zoom
        handle = handle_at_point(state.crop_area, point, radius)
        if handle is not None:
            state.crop_drag.active_handle = handle
            return True
        return False
    state.crop_drag.anchor = point
    return True


def crop_on_pointer_move(editor: "FloorplanEditor", point: Point) -> bool:
    state = editor.state
    drag = state.crop_drag
    if drag.active_handle is not None and state.crop_area is not None:
        state.crop_area, drag.active_handle = resize_crop(state.crop_area, drag.active_handle, point)
        return True
    if drag.anchor is not None:
        state.crop_area = crop_from_corners(drag.anchor, point)
        return True
    return False


def crop_on_pointer_up(editor: "FloorplanEditor") -> bool:
    state = editor.state
    if not state.crop_drag.active:
        return False
    creating = state.crop_drag.anchor is not None
    state.crop_drag.anchor = None
    state.crop_drag.active_handle = None
    crop = state.crop_area
    if creating and crop is not None and (crop.width <= 0 or crop.height <= 0):
        state.crop_area = None
    return True


def confirm_crop(editor: "FloorplanEditor") -> bool:
    if editor.state.crop_area is None:
        editor.notify(NoticeLevel.WARNING, "Drag a rectangle over the floorplan first.")
        return False
    return editor.set_mode(EditorMode.SCALE)


def reset_crop(editor: "FloorplanEditor") -> None:
    editor.state.crop_area = None
    editor.state.crop_drag.anchor = None
    editor.state.crop_drag.active_handle = None
    editor.redraw()
