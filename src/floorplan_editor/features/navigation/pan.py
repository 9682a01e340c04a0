from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ...core.model import Point
from ...core.transform import pan_by

if TYPE_CHECKING:
    from ...editor import FloorplanEditor


def pan_canvas(editor: "FloorplanEditor", dx: float, dy: float) -> None:
    """Pan the view by the specified amount in screen pixels."""
    editor.viewport = pan_by(editor.viewport, dx, dy)
    editor.redraw()


def on_pan_start(editor: "FloorplanEditor", screen_point: Point) -> None:
    drag = editor.state.pan_drag
    drag.last_screen = screen_point
    drag.moved = 0.0


def on_pan_move(editor: "FloorplanEditor", screen_point: Point) -> bool:
    drag = editor.state.pan_drag
    if drag.last_screen is None:
        return False
    dx = screen_point.x - drag.last_screen.x
    dy = screen_point.y - drag.last_screen.y
    drag.moved += math.hypot(dx, dy)
    drag.last_screen = screen_point
    editor.viewport = pan_by(editor.viewport, dx, dy)
    return True


def on_pan_end(editor: "FloorplanEditor") -> float:
    """Finish a drag and return how far the pointer travelled."""
    drag = editor.state.pan_drag
    moved = drag.moved
    drag.last_screen = None
    drag.moved = 0.0
    return moved
