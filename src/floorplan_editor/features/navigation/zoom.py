from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ...core.model import Point
from ...core.transform import fit_viewport, zoom_at

if TYPE_CHECKING:
    from ...editor import FloorplanEditor


def _canvas_centre(editor: "FloorplanEditor") -> Point:
    view_w, view_h = editor.canvas_size
    return Point(view_w / 2, view_h / 2)


def set_zoom(editor: "FloorplanEditor", zoom: float, anchor: Optional[Point] = None) -> None:
    """Zoom around ``anchor`` (screen space), or the canvas centre when the pointer is elsewhere."""
    if editor.image_size is None:
        return
    if anchor is None:
        anchor = _canvas_centre(editor)
    cfg = editor.config
    editor.viewport = zoom_at(editor.viewport, anchor, zoom, cfg.zoom_min, cfg.zoom_max)
    editor.redraw()


def zoom_in(editor: "FloorplanEditor") -> None:
    set_zoom(editor, editor.viewport.zoom + editor.config.zoom_step)


def zoom_out(editor: "FloorplanEditor") -> None:
    set_zoom(editor, editor.viewport.zoom - editor.config.zoom_step)


def zoom_on_wheel(editor: "FloorplanEditor", screen_point: Point, delta_y: float) -> None:
    """Scroll down zooms out, scroll up zooms in, keeping the image under the pointer still."""
    cfg = editor.config
    factor = cfg.wheel_zoom_out if delta_y > 0 else cfg.wheel_zoom_in
    set_zoom(editor, editor.viewport.zoom * factor, screen_point)


def fit_to_view(editor: "FloorplanEditor") -> None:
    if editor.image_size is None:
        return
    cfg = editor.config
    editor.viewport = fit_viewport(
        editor.image_size, editor.canvas_size, cfg.fit_padding_px, cfg.zoom_min, cfg.zoom_max
    )
    editor.redraw()
