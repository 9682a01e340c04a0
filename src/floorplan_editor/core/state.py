from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .model import CropArea, Point, Region


class EditorMode(str, Enum):
    CROP = 'crop'
    SCALE = 'scale'
    REGION = 'region'
    PAN = 'pan'


class DrawingMode(str, Enum):
    FREEFORM = 'freeform'
    RECTANGLE = 'rectangle'


class HandleType(str, Enum):
    NW = 'nw'
    N = 'n'
    NE = 'ne'
    E = 'e'
    SE = 'se'
    S = 's'
    SW = 'sw'
    W = 'w'


class NoticeLevel(str, Enum):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'


@dataclass
class ModeState:
    """Active mode plus the single mode slot that pan returns to."""

    current: EditorMode = EditorMode.CROP
    previous: EditorMode = EditorMode.CROP

    def switch(self, mode: EditorMode) -> None:
        if mode is EditorMode.PAN:
            self.enter_pan()
            return
        self.current = mode

    def enter_pan(self) -> None:
        if self.current is EditorMode.PAN:
            return
        self.previous = self.current
        self.current = EditorMode.PAN

    def exit_pan(self) -> None:
        if self.current is EditorMode.PAN:
            self.current = self.previous


@dataclass
class CropDragState:
    anchor: Optional[Point] = None
    active_handle: Optional[HandleType] = None

    @property
    def active(self) -> bool:
        return self.anchor is not None or self.active_handle is not None


@dataclass
class ScaleState:
    points: List[Point] = field(default_factory=list)
    awaiting_measurement: bool = False


@dataclass
class RegionDrawState:
    sub_mode: DrawingMode = DrawingMode.FREEFORM
    current_region: Optional[Region] = None
    rectangle_anchor: Optional[Point] = None

    @property
    def drawing(self) -> bool:
        return self.current_region is not None

    def clear(self) -> None:
        self.current_region = None
        self.rectangle_anchor = None


@dataclass
class PanDragState:
    last_screen: Optional[Point] = None
    moved: float = 0.0


@dataclass
class EditorState:
    """Everything the session edits; viewport lives on the editor."""

    mode: ModeState = field(default_factory=ModeState)
    crop_area: Optional[CropArea] = None
    crop_drag: CropDragState = field(default_factory=CropDragState)
    scale: ScaleState = field(default_factory=ScaleState)
    pixels_per_metre: Optional[float] = None
    regions: List[Region] = field(default_factory=list)
    draw: RegionDrawState = field(default_factory=RegionDrawState)
    pan_drag: PanDragState = field(default_factory=PanDragState)
    # Last pointer position in image space, for previews.
    pointer: Optional[Point] = None
