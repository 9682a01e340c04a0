from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional, Union

from ...core.errors import InvalidMeasurementError
from ...core.geometry import distance
from ...core.model import Point
from ...core.state import EditorMode, NoticeLevel

if TYPE_CHECKING:
    from ...editor import FloorplanEditor

logger = logging.getLogger(__name__)


def pixel_distance(editor: "FloorplanEditor") -> Optional[float]:
    points = editor.state.scale.points
    if len(points) != 2:
        return None
    return distance(points[0], points[1])


def parse_measurement(value: Union[str, float, int]) -> float:
    """Validate a real-world distance in metres entered by the operator."""
    if isinstance(value, bool):
        raise InvalidMeasurementError("Enter a numeric value for the length.")
    try:
        metres = float(value)
    except (TypeError, ValueError):
        raise InvalidMeasurementError("Enter a numeric value for the length.") from None
    if not math.isfinite(metres):
        raise InvalidMeasurementError("Enter a numeric value for the length.")
    if metres <= 0:
        raise InvalidMeasurementError("Length must be greater than zero.")
    return metres


def scale_on_canvas_click(editor: "FloorplanEditor", point: Point) -> bool:
    """Record a calibration point. Return True if handled."""
    scale = editor.state.scale
    if len(scale.points) >= 2:
        return False
    scale.points.append(point)
    if len(scale.points) < 2:
        return True
    if pixel_distance(editor) == 0:
        scale.points.clear()
        editor.notify(NoticeLevel.ERROR, "Select two distinct points to set the scale.")
        return True
    scale.awaiting_measurement = True
    editor.request_measurement()
    return True


def submit_measurement(editor: "FloorplanEditor", value: Union[str, float, int]) -> float:
    """Set pixels-per-metre from the entered distance and continue to region mapping.

    Invalid input raises InvalidMeasurementError and leaves the points in place.
    """
    pixels = pixel_distance(editor)
    if pixels is None:
        raise InvalidMeasurementError("Click two points before entering a distance.")
    metres = parse_measurement(value)
    scale = editor.state.scale
    editor.state.pixels_per_metre = pixels / metres
    scale.awaiting_measurement = False
    logger.info("Scale set to %.4f px/m from %.2f px over %.3f m",
                editor.state.pixels_per_metre, pixels, metres)
    editor.set_mode(EditorMode.REGION)
    return editor.state.pixels_per_metre


def cancel_measurement(editor: "FloorplanEditor") -> None:
    scale = editor.state.scale
    scale.points.clear()
    scale.awaiting_measurement = False
    editor.redraw()


def reset_scale(editor: "FloorplanEditor") -> None:
    """Forget the calibration; region mapping stays disabled until recalibrated."""
    scale = editor.state.scale
    scale.points.clear()
    scale.awaiting_measurement = False
    editor.state.pixels_per_metre = None
    mode = editor.state.mode
    if mode.current is EditorMode.REGION:
        editor.set_mode(EditorMode.SCALE)
    elif mode.current is EditorMode.PAN and mode.previous is EditorMode.REGION:
        mode.previous = EditorMode.SCALE
    editor.redraw()
