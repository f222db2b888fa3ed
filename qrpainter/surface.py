"""Drawing surfaces: the abstract capability the renderer draws on, a recorder, and a Pillow rasterizer."""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np
from PIL import Image, ImageColor, ImageDraw

from qrpainter.geometry import Rect
from qrpainter.logging import audit, get_logger, trace

log = get_logger("surface")

DEFAULT_SUPERSAMPLE = 4
TRANSPARENT = (0, 0, 0, 0)


def to_rgba(color) -> tuple[int, int, int, int]:
    """Normalise an RGB/RGBA tuple or a Pillow colour string to an RGBA tuple."""
    if isinstance(color, str):
        return ImageColor.getcolor(color, "RGBA")
    values = tuple(int(c) for c in color)
    if len(values) == 3:
        return values + (255,)
    if len(values) == 4:
        return values
    raise ValueError(f"Colour must have 3 or 4 channels, got {color!r}")


class RenderSurface(ABC):
    """Minimal 2-D drawing capability. Coordinates are in logical pixels."""

    @abstractmethod
    def fill_background(self, color) -> None:
        ...

    @abstractmethod
    def draw_filled_circle(self, center: tuple[float, float], radius: float, color) -> None:
        ...

    @abstractmethod
    def draw_ring(self, bounds: Rect, stroke_width: float, color) -> None:
        """Stroke the circle inscribed in ``bounds``; the stroke is centred on that circle."""


@dataclass(frozen=True)
class DrawOp:
    kind: str
    args: tuple


class RecordingSurface(RenderSurface):
    """Records draw calls so they can be replayed at any resolution."""

    def __init__(self):
        self.ops: list[DrawOp] = []

    def fill_background(self, color) -> None:
        self.ops.append(DrawOp("fill_background", (to_rgba(color),)))

    def draw_filled_circle(self, center, radius, color) -> None:
        self.ops.append(DrawOp("draw_filled_circle", ((float(center[0]), float(center[1])), float(radius), to_rgba(color))))

    def draw_ring(self, bounds, stroke_width, color) -> None:
        self.ops.append(DrawOp("draw_ring", (bounds, float(stroke_width), to_rgba(color))))

    def ops_of(self, kind: str) -> list[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def end_recording(self, width: float, height: float) -> "Picture":
        return Picture(ops=tuple(self.ops), width=width, height=height)


class PillowSurface(RenderSurface):
    """Draws onto a Pillow image, multiplying every coordinate by ``scale``."""

    def __init__(self, image: Image.Image, scale: float = 1.0):
        self.image = image
        self.scale = scale
        self.draw = ImageDraw.Draw(image)

    def fill_background(self, color) -> None:
        w, h = self.image.size
        self.draw.rectangle([0, 0, w, h], fill=to_rgba(color))

    def draw_filled_circle(self, center, radius, color) -> None:
        if radius <= 0:
            return
        s = self.scale
        cx, cy, r = center[0] * s, center[1] * s, radius * s
        self.draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=to_rgba(color))

    def draw_ring(self, bounds, stroke_width, color) -> None:
        if stroke_width <= 0:
            return
        s = self.scale
        half = stroke_width * s / 2.0
        x0, y0, x1, y1 = (v * s for v in bounds.as_box())
        # Pillow strokes inward from the box edge; grow the box by half a stroke to centre it.
        self.draw.ellipse(
            [x0 - half, y0 - half, x1 + half, y1 + half],
            outline=to_rgba(color),
            width=max(1, round(stroke_width * s)),
        )


class ImageFormat(Enum):
    PNG = "png"
    RAW_RGBA = "raw"


@dataclass(frozen=True)
class Picture:
    """An immutable recorded drawing with its logical size."""
    ops: tuple[DrawOp, ...]
    width: float
    height: float

    def replay(self, surface: RenderSurface) -> None:
        for op in self.ops:
            getattr(surface, op.kind)(*op.args)

    @trace
    def to_image(self, width: int, height: int | None = None,
                 supersample: int = DEFAULT_SUPERSAMPLE, scale: float | None = None) -> Image.Image:
        """Rasterize at ``width`` x ``height`` pixels.

        Drawn at ``supersample`` times the resolution and Lanczos-downscaled
        for anti-aliased edges. By default the logical size is fitted to the
        pixel size; pass ``scale`` to draw at a fixed factor and clip instead.
        """
        height = width if height is None else height
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        ss = max(1, int(supersample))
        if scale is None:
            scale_x = width / self.width if self.width else 1.0
            scale_y = height / self.height if self.height else 1.0
            scale = min(scale_x, scale_y)
        scale *= ss

        canvas = Image.new("RGBA", (width * ss, height * ss), TRANSPARENT)
        self.replay(PillowSurface(canvas, scale=scale))
        if ss > 1:
            canvas = canvas.resize((width, height), Image.LANCZOS)
        return canvas


@trace
def encode_image(image: Image.Image, fmt: ImageFormat = ImageFormat.PNG) -> bytes:
    """Serialize a rasterized image. ``RAW_RGBA`` is 4 bytes per pixel, row-major."""
    rgba = image.convert("RGBA")
    if fmt == ImageFormat.RAW_RGBA:
        data = np.asarray(rgba, dtype=np.uint8).tobytes()
    else:
        buf = io.BytesIO()
        rgba.save(buf, format="PNG")
        data = buf.getvalue()
    audit("export.encoded", logger=log, format=fmt.value, px=f"{image.size[0]}x{image.size[1]}", bytes=len(data))
    return data
