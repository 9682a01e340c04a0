"""
Headless editor session.

``FloorplanEditor`` owns the editing state for one property's floorplan,
receives pointer and keyboard events in screen coordinates, routes them to
the tool for the active mode and re-renders after every mutation. Hosts
(the Tk window, tests) plug in through the ``on_*`` hooks.
"""

from __future__ import annotations

import copy
import logging
import os
from typing import Callable, List, Optional, Tuple, Union

from PIL import Image

from .core import facade
from .core.config import EditorConfig
from .core.errors import (
    EditorNotReadyError,
    ImageLoadError,
    RecordNotFoundError,
    ScaleNotSetError,
    StoreError,
)
from .core.geometry import round_coordinate
from .core.model import FloorplanRecord, Point, Region
from .core.state import EditorMode, EditorState, ModeState, NoticeLevel
from .core.transform import Viewport, fit_viewport, to_image_space
from .app_io.store import RecordStore
from .features.editing.regions import RegionSummary
from .file_io import load_source_image
from .ui.commands import DrawCommand
from .ui.render import render_editor

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 1
SECONDARY_BUTTON = 3
# A secondary press that travels less than this is a click, not a pan.
CLICK_SLOP_PX = 3.0

_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


class FloorplanEditor:
    """Editing session for a single property's floorplan."""

    def __init__(
        self,
        property_id: str,
        store: RecordStore,
        image_path: str = '',
        config: Optional[EditorConfig] = None,
        canvas_size: Tuple[int, int] = (800, 600),
    ) -> None:
        self.property_id = property_id
        self.store = store
        self.image_path = image_path
        self.config = config or EditorConfig()
        self.state = EditorState()
        self.viewport = Viewport()
        self.image: Optional[Image.Image] = None
        self.image_size: Optional[Tuple[int, int]] = None  # natural size once decoded
        self.canvas_size = canvas_size
        self.device_pixel_ratio = 1.0
        self.load_error: Optional[str] = None
        self.saving = False
        self.commands: List[DrawCommand] = []
        # Host hooks
        self.on_render: Optional[Callable[[List[DrawCommand]], None]] = None
        self.on_notice: Optional[Callable[[NoticeLevel, str], None]] = None
        self.on_measurement_requested: Optional[Callable[[float], None]] = None
        self.on_saved: Optional[Callable[[FloorplanRecord], None]] = None

    # ----- Host plumbing -----
    @property
    def is_ready(self) -> bool:
        return self.image_size is not None and self.load_error is None

    @property
    def mode(self) -> EditorMode:
        return self.state.mode.current

    def notify(self, level: NoticeLevel, message: str) -> None:
        logger.log(_LOG_LEVELS[level], message)
        if self.on_notice:
            self.on_notice(level, message)

    def redraw(self) -> None:
        self.commands = render_editor(self)
        if self.on_render:
            self.on_render(self.commands)

    def request_measurement(self) -> None:
        """Ask the host for the real-world length of the calibration line."""
        pixels = facade.scale_pixel_distance(self)
        if self.on_measurement_requested and pixels is not None:
            self.on_measurement_requested(pixels)

    def resize(self, width: int, height: int, device_pixel_ratio: Optional[float] = None) -> None:
        """Track the canvas size; zoom and pan are left alone."""
        self.canvas_size = (max(1, int(width)), max(1, int(height)))
        if device_pixel_ratio:
            self.device_pixel_ratio = device_pixel_ratio
        self.redraw()

    # ----- Image lifecycle -----
    def open_image(self, path: str) -> bool:
        """Start a fresh session on ``path``: decode, fit and restore any saved record."""
        self.state = EditorState()
        path = os.path.abspath(path)
        self.image_path = path
        try:
            image = load_source_image(path)
        except ImageLoadError as e:
            self.fail_image(e)
            return False
        self.attach_image(image)
        self.load_existing()
        return True

    def attach_image(self, image: Image.Image, path: Optional[str] = None) -> None:
        if path is not None:
            self.image_path = path
        self.image = image
        self.image_size = image.size
        self.load_error = None
        cfg = self.config
        self.viewport = fit_viewport(
            self.image_size, self.canvas_size, cfg.fit_padding_px, cfg.zoom_min, cfg.zoom_max
        )
        self.redraw()

    def fail_image(self, error: Exception) -> None:
        self.image = None
        self.image_size = None
        self.load_error = str(error)
        self.notify(NoticeLevel.ERROR, f"Failed to load floorplan image: {error}")
        self.redraw()

    # ----- Modes -----
    def set_mode(self, mode: EditorMode) -> bool:
        """Switch the active tool. Region mapping needs a calibrated scale."""
        modes = self.state.mode
        if mode is EditorMode.PAN:
            facade.crop_on_pointer_up(self)
            modes.enter_pan()
            self.redraw()
            return True
        if mode is EditorMode.REGION and self.state.pixels_per_metre is None:
            self.notify(NoticeLevel.WARNING, "Set the scale before mapping regions.")
            return False
        if modes.current is EditorMode.PAN and modes.previous is mode:
            self.exit_pan()
            return True
        if mode is not modes.current:
            self.state.draw.clear()
        modes.switch(mode)
        self.state.crop_drag.anchor = None
        self.state.crop_drag.active_handle = None
        self.redraw()
        return True

    def toggle_pan(self) -> EditorMode:
        if self.mode is EditorMode.PAN:
            self.exit_pan()
        else:
            self.set_mode(EditorMode.PAN)
        return self.mode

    def exit_pan(self) -> None:
        facade.pan_on_end(self)
        self.state.mode.exit_pan()
        self.redraw()

    # ----- Pointer input (screen coordinates) -----
    def _image_point(self, x: float, y: float) -> Point:
        return to_image_space(Point(x, y), self.viewport)

    def pointer_down(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        if not self.is_ready:
            return False
        if button == SECONDARY_BUTTON or self.mode is EditorMode.PAN:
            facade.pan_on_start(self, Point(x, y))
            return True
        if self.mode is EditorMode.CROP and facade.crop_on_pointer_down(self, self._image_point(x, y)):
            self.redraw()
            return True
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        if not self.is_ready:
            return False
        if facade.pan_on_move(self, Point(x, y)):
            self.state.pointer = self._image_point(x, y)
            self.redraw()
            return True
        point = self._image_point(x, y)
        self.state.pointer = point
        if self.mode is EditorMode.CROP:
            facade.crop_on_pointer_move(self, point)
        self.redraw()
        return True

    def pointer_up(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        if not self.is_ready:
            return False
        if self.state.pan_drag.last_screen is not None:
            moved = facade.pan_on_end(self)
            if button == SECONDARY_BUTTON and moved < CLICK_SLOP_PX and self.mode is not EditorMode.PAN:
                self.secondary_click()
            else:
                self.redraw()
            return True
        if self.mode is EditorMode.CROP:
            if facade.crop_on_pointer_up(self):
                self.redraw()
                return True
            return False
        if button == PRIMARY_BUTTON:
            return self.click(x, y)
        return False

    def click(self, x: float, y: float) -> bool:
        """Primary click in scale or region mode."""
        if not self.is_ready:
            return False
        raw = self._image_point(x, y)
        point = Point(round_coordinate(raw.x), round_coordinate(raw.y))
        if self.mode is EditorMode.SCALE:
            handled = facade.scale_on_canvas_click(self, point)
        elif self.mode is EditorMode.REGION:
            handled = facade.draw_on_canvas_click(self, point)
        else:
            handled = False
        if handled:
            self.redraw()
        return handled

    def secondary_click(self) -> Optional[Region]:
        """Complete the current trace as-is."""
        if not self.is_ready or self.mode is not EditorMode.REGION:
            return None
        region = facade.draw_finish(self)
        self.redraw()
        return region

    def wheel(self, x: float, y: float, delta_y: float) -> None:
        if not self.is_ready:
            return
        facade.zoom_on_wheel(self, Point(x, y), delta_y)

    def key(self, key: str, ctrl: bool = False) -> bool:
        """Region-mode shortcuts: r toggles the drawing mode, Escape cancels, Ctrl/Cmd+Z undoes a point."""
        if not self.is_ready or self.mode is not EditorMode.REGION:
            return False
        key = key.lower()
        if ctrl and key == 'z':
            facade.draw_undo_point(self)
            return True
        if ctrl:
            return False
        if key == 'r':
            facade.draw_toggle_mode(self)
            return True
        if key == 'escape':
            facade.draw_cancel(self)
            return True
        return False

    # ----- Scale dialog -----
    def submit_measurement(self, value: Union[str, float, int]) -> float:
        return facade.scale_submit_measurement(self, value)

    def cancel_measurement(self) -> None:
        facade.scale_cancel_measurement(self)

    def region_summaries(self) -> List[RegionSummary]:
        return facade.regions_summaries(self.state.regions, self.state.pixels_per_metre)

    # ----- Persistence -----
    def load_existing(self) -> Optional[FloorplanRecord]:
        """Restore the stored record for this property, if it matches the open image."""
        try:
            record = self.store.load_floorplan(self.property_id)
        except RecordNotFoundError:
            logger.info("No saved floorplan for property %s", self.property_id)
            return None
        except StoreError as e:
            logger.error("Failed to load floorplan for property %s: %s", self.property_id, e)
            return None
        if not _same_path(record.file_path, self.image_path):
            self.notify(
                NoticeLevel.WARNING,
                "The saved floorplan was made for a different image and has been discarded.",
            )
            return None

        state = self.state
        state.regions = list(record.regions)
        state.crop_area = record.crop_area
        if record.pixels_per_meter and record.pixels_per_meter > 0:
            state.pixels_per_metre = record.pixels_per_meter
            state.mode = ModeState(EditorMode.REGION, EditorMode.REGION)
        else:
            state.mode = ModeState(EditorMode.SCALE, EditorMode.SCALE)
        logger.info("Restored floorplan for property %s with %d regions",
                    self.property_id, len(state.regions))
        self.redraw()
        return record

    def build_record(self) -> FloorplanRecord:
        ppm = self.state.pixels_per_metre
        if ppm is None:
            raise ScaleNotSetError("Set the scale before saving.")
        if self.image_size is None:
            raise EditorNotReadyError("The floorplan image has not loaded.")
        metadata = {}
        if self.state.crop_area is not None:
            metadata['crop_area'] = self.state.crop_area.to_dict()
        width, height = self.image_size
        return FloorplanRecord(
            property_id=self.property_id,
            file_path=self.image_path,
            original_width=width,
            original_height=height,
            pixels_per_meter=ppm,
            regions=copy.deepcopy(self.state.regions),
            metadata=metadata,
        )

    def save(self) -> Optional[FloorplanRecord]:
        """Upsert the floorplan record. Returns None if refused or the store failed."""
        if self.saving:
            logger.warning("Save already in progress for property %s", self.property_id)
            return None
        record = self.build_record()
        self.saving = True
        try:
            self.store.save_floorplan(record)
        except StoreError as e:
            self.notify(NoticeLevel.ERROR, f"Failed to save floorplan: {e}")
            return None
        finally:
            self.saving = False
        self.notify(NoticeLevel.INFO, "Floorplan saved.")
        if self.on_saved:
            self.on_saved(record)
        return record


def _same_path(a: str, b: str) -> bool:
    if a == b:
        return True
    if not a or not b:
        return False
    return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))
