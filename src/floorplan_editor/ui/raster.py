from __future__ import annotations

import math
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFont

from ..core.model import CropArea, Point
from .commands import (
    BeginClip,
    Checkerboard,
    Circle,
    Color,
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
)

DevicePoint = Tuple[float, float]


def dash_segments(
    points: Sequence[DevicePoint], on: float, off: float
) -> List[Tuple[DevicePoint, DevicePoint]]:
    """Split a polyline into the visible pieces of an on/off dash pattern."""
    segments: List[Tuple[DevicePoint, DevicePoint]] = []
    if on <= 0:
        return segments
    period = on + off
    phase = 0.0
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            continue
        ux, uy = (x1 - x0) / length, (y1 - y0) / length
        pos = 0.0
        while pos < length:
            offset = phase % period
            if offset < on:
                step = min(on - offset, length - pos)
                start = (x0 + ux * pos, y0 + uy * pos)
                end = (x0 + ux * (pos + step), y0 + uy * (pos + step))
                segments.append((start, end))
            else:
                step = min(period - offset, length - pos)
            pos += step
            phase += step
    return segments


class RasterCanvas:
    """Executes draw commands into a Pillow RGBA image.

    ``size`` is the canvas size in screen pixels; the backing image is
    ``size * device_pixel_ratio`` so output stays sharp on high-DPI displays.
    """

    def __init__(
        self,
        size: Tuple[int, int],
        device_pixel_ratio: float = 1.0,
        source: Optional[Image.Image] = None,
    ) -> None:
        self.size = size
        self.dpr = device_pixel_ratio
        self.source = source.convert('RGBA') if source is not None and source.mode != 'RGBA' else source
        width = max(1, int(math.ceil(size[0] * device_pixel_ratio)))
        height = max(1, int(math.ceil(size[1] * device_pixel_ratio)))
        self.image = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        # (zoom, pan_x, pan_y) in screen pixels, outermost first.
        self._transforms: List[Tuple[float, float, float]] = [(1.0, 0.0, 0.0)]
        self._clips: List[Image.Image] = []
        self._clip_boxes: List[Optional[Tuple[int, int, int, int]]] = []
        self._fonts = {}
        self._measure = ImageDraw.Draw(self.image)

    # ----- Coordinate mapping -----
    def to_device(self, point: Point) -> DevicePoint:
        zoom, pan_x, pan_y = self._transforms[-1]
        return ((point.x * zoom + pan_x) * self.dpr, (point.y * zoom + pan_y) * self.dpr)

    def length(self, value: float) -> float:
        return value * self._transforms[-1][0] * self.dpr

    def _box(self, rect: CropArea) -> Tuple[float, float, float, float]:
        x0, y0 = self.to_device(Point(rect.x, rect.y))
        x1, y1 = self.to_device(Point(rect.right, rect.bottom))
        return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)

    def _width(self, value: float) -> int:
        return max(1, int(round(self.length(value))))

    def _font(self, size: float) -> ImageFont.ImageFont:
        px = max(1, int(round(self.length(size))))
        if px not in self._fonts:
            self._fonts[px] = ImageFont.load_default(size=px)
        return self._fonts[px]

    # ----- Compositing -----
    def _paint(
        self,
        bounds: Tuple[float, float, float, float],
        pad: float,
        painter: Callable[[ImageDraw.ImageDraw, DevicePoint], None],
    ) -> None:
        """Draw onto a layer covering ``bounds`` grown by ``pad`` and composite it.

        The painter receives the layer origin and must subtract it from
        device coordinates. Nothing is drawn when the box misses the canvas
        or the active clip.
        """
        left = max(0, int(math.floor(bounds[0] - pad)))
        top = max(0, int(math.floor(bounds[1] - pad)))
        right = min(self.image.width, int(math.ceil(bounds[2] + pad)) + 1)
        bottom = min(self.image.height, int(math.ceil(bounds[3] + pad)) + 1)
        if self._clips:
            clip_box = self._clip_boxes[-1]
            if clip_box is None:
                return
            left, top = max(left, clip_box[0]), max(top, clip_box[1])
            right, bottom = min(right, clip_box[2]), min(bottom, clip_box[3])
        if right <= left or bottom <= top:
            return
        box = (left, top, right, bottom)
        layer = Image.new('RGBA', (right - left, bottom - top), (0, 0, 0, 0))
        painter(ImageDraw.Draw(layer), (left, top))
        if self._clips:
            layer.putalpha(ImageChops.multiply(layer.getchannel('A'), self._clips[-1].crop(box)))
        self.image.alpha_composite(layer, dest=(left, top))

    def execute(self, commands: Iterable[DrawCommand]) -> Image.Image:
        for cmd in commands:
            handler = getattr(self, '_draw_' + type(cmd).__name__)
            handler(cmd)
        return self.image

    # ----- Command handlers -----
    def _draw_Checkerboard(self, cmd: Checkerboard) -> None:
        cell = max(1, int(round(cmd.cell * self.dpr)))
        tile = Image.new('RGBA', (cell * 2, cell * 2), cmd.colors[1])
        tile_draw = ImageDraw.Draw(tile)
        tile_draw.rectangle([0, 0, cell - 1, cell - 1], fill=cmd.colors[0])
        tile_draw.rectangle([cell, cell, cell * 2 - 1, cell * 2 - 1], fill=cmd.colors[0])
        width = int(math.ceil(cmd.width * self.dpr))
        height = int(math.ceil(cmd.height * self.dpr))
        board = Image.new('RGBA', (width, height))
        for top in range(0, height, cell * 2):
            for left in range(0, width, cell * 2):
                board.paste(tile, (left, top))
        self.image.alpha_composite(board.crop((0, 0, min(width, self.image.width), min(height, self.image.height))))

    def _draw_PushTransform(self, cmd: PushTransform) -> None:
        zoom, pan_x, pan_y = self._transforms[-1]
        self._transforms.append((zoom * cmd.zoom, pan_x + cmd.pan.x * zoom, pan_y + cmd.pan.y * zoom))

    def _draw_PopTransform(self, cmd: PopTransform) -> None:
        if len(self._transforms) > 1:
            self._transforms.pop()

    def _draw_BeginClip(self, cmd: BeginClip) -> None:
        mask = Image.new('L', self.image.size, 0)
        ImageDraw.Draw(mask).rectangle(self._box(cmd.rect), fill=255)
        if self._clips:
            mask = ImageChops.multiply(mask, self._clips[-1])
        self._clips.append(mask)
        self._clip_boxes.append(mask.getbbox())

    def _draw_EndClip(self, cmd: EndClip) -> None:
        if self._clips:
            self._clips.pop()
            self._clip_boxes.pop()

    def _draw_DrawImage(self, cmd: DrawImage) -> None:
        if self.source is None:
            return
        x0, y0, x1, y1 = self._box(CropArea(0, 0, cmd.width, cmd.height))
        vx0, vy0 = max(0, int(math.floor(x0))), max(0, int(math.floor(y0)))
        vx1 = min(self.image.width, int(math.ceil(x1)))
        vy1 = min(self.image.height, int(math.ceil(y1)))
        if vx1 <= vx0 or vy1 <= vy0 or x1 <= x0 or y1 <= y0:
            return
        src_w, src_h = self.source.size
        sx = src_w / (x1 - x0)
        sy = src_h / (y1 - y0)
        box = (
            max(0.0, (vx0 - x0) * sx),
            max(0.0, (vy0 - y0) * sy),
            min(float(src_w), (vx1 - x0) * sx),
            min(float(src_h), (vy1 - y0) * sy),
        )
        patch = self.source.resize((vx1 - vx0, vy1 - vy0), Image.Resampling.LANCZOS, box=box)
        self.image.alpha_composite(patch, dest=(vx0, vy0))

    def _draw_PunchedOverlay(self, cmd: PunchedOverlay) -> None:
        outer = self._box(cmd.outer)

        def painter(draw: ImageDraw.ImageDraw, origin: DevicePoint) -> None:
            draw.rectangle(_shift_box(outer, origin), fill=cmd.fill)
            if cmd.hole is not None:
                draw.rectangle(_shift_box(self._box(cmd.hole), origin), fill=(0, 0, 0, 0))
        self._paint(outer, 0, painter)

    def _draw_StrokeRect(self, cmd: StrokeRect) -> None:
        box = self._box(cmd.rect)
        width = self._width(cmd.width)
        self._paint(box, width, lambda d, o: d.rectangle(_shift_box(box, o), outline=cmd.color, width=width))

    def _draw_FillRect(self, cmd: FillRect) -> None:
        box = self._box(cmd.rect)
        self._paint(box, 0, lambda d, o: d.rectangle(_shift_box(box, o), fill=cmd.fill))

    def _draw_Circle(self, cmd: Circle) -> None:
        cx, cy = self.to_device(cmd.center)
        r = self.length(cmd.radius)
        outline: Optional[Color] = cmd.outline
        width = self._width(cmd.width) if outline is not None else 0
        box = (cx - r, cy - r, cx + r, cy + r)
        self._paint(box, width, lambda d, o: d.ellipse(_shift_box(box, o),
                                                       fill=cmd.fill, outline=outline, width=width))

    def _draw_Polygon(self, cmd: Polygon) -> None:
        pts = [self.to_device(p) for p in cmd.points]
        if not pts:
            return
        width = self._width(cmd.width)

        def painter(draw: ImageDraw.ImageDraw, origin: DevicePoint) -> None:
            local = _shift(pts, origin)
            if cmd.fill is not None:
                draw.polygon(local, fill=cmd.fill)
            if cmd.outline is not None:
                draw.line(local + [local[0]], fill=cmd.outline, width=width, joint='curve')
        self._paint(_bounds(pts), width, painter)

    def _draw_Polyline(self, cmd: Polyline) -> None:
        pts = [self.to_device(p) for p in cmd.points]
        if not pts:
            return
        width = self._width(cmd.width)
        if cmd.dash is None:
            self._paint(_bounds(pts), width,
                        lambda d, o: d.line(_shift(pts, o), fill=cmd.color, width=width, joint='curve'))
            return
        segments = dash_segments(pts, self.length(cmd.dash[0]), self.length(cmd.dash[1]))

        def painter(draw: ImageDraw.ImageDraw, origin: DevicePoint) -> None:
            for start, end in segments:
                draw.line(_shift([start, end], origin), fill=cmd.color, width=width)
        self._paint(_bounds(pts), width, painter)

    def _draw_Text(self, cmd: Text) -> None:
        font = self._font(cmd.size)
        x, y = self.to_device(cmd.position)
        left, top, right, bottom = self._measure.textbbox((0, 0), cmd.text, font=font)
        # Centred horizontally, sitting on the baseline like canvas fillText.
        pos = (x - (right - left) / 2 - left, y - bottom)
        box = (pos[0] + left, pos[1] + top, pos[0] + right, pos[1] + bottom)
        self._paint(box, 1, lambda d, o: d.text(_shift([pos], o)[0], cmd.text, fill=cmd.color, font=font))


def _shift(points: Sequence[DevicePoint], origin: DevicePoint) -> List[DevicePoint]:
    return [(x - origin[0], y - origin[1]) for x, y in points]


def _shift_box(box: Tuple[float, float, float, float], origin: DevicePoint) -> Tuple[float, float, float, float]:
    return box[0] - origin[0], box[1] - origin[1], box[2] - origin[0], box[3] - origin[1]


def _bounds(points: Sequence[DevicePoint]) -> Tuple[float, float, float, float]:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def rasterize(
    commands: Iterable[DrawCommand],
    size: Tuple[int, int],
    source: Optional[Image.Image] = None,
    device_pixel_ratio: float = 1.0,
) -> Image.Image:
    return RasterCanvas(size, device_pixel_ratio, source).execute(commands)
