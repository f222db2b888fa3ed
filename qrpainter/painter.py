"""Render entry point: owns one grid + config, draws it on a surface, and exports images.

A painter is either ready (it holds a grid) or failed (the encoder rejected
the input). Failure is captured at construction and is permanent: rendering
a failed painter draws nothing at all.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from PIL import Image

from qrpainter.encoder import AUTO_VERSION, ECCLevel, EncodeFailure, ModuleGrid, encode_grid
from qrpainter.geometry import module_size, shortest_side
from qrpainter.logging import audit, emit, get_logger, trace
from qrpainter.render import paint_finder_eyes, paint_modules
from qrpainter.surface import (
    DEFAULT_SUPERSAMPLE,
    ImageFormat,
    Picture,
    RecordingSurface,
    RenderSurface,
    encode_image,
    to_rgba,
)

log = get_logger("painter")

DEFAULT_COLOR = (0, 0, 0, 255)

ErrorCallback = Callable[[EncodeFailure], None]


class RenderError(RuntimeError):
    """Raised when measuring a painter whose grid could not be built."""


def _ecc_letter(level) -> str:
    if isinstance(level, ECCLevel):
        return level.name
    return str(level).upper()


@dataclass(frozen=True)
class RenderConfig:
    color: tuple[int, int, int, int] = DEFAULT_COLOR
    empty_color: tuple[int, int, int, int] | None = None
    gapless: bool = False
    version: int = AUTO_VERSION
    error_correction_level: str = "L"

    @classmethod
    def build(cls, color=DEFAULT_COLOR, empty_color=None, gapless=False,
              version=AUTO_VERSION, error_correction_level="L") -> "RenderConfig":
        return cls(
            color=to_rgba(color),
            empty_color=to_rgba(empty_color) if empty_color is not None else None,
            gapless=bool(gapless),
            version=version,
            error_correction_level=_ecc_letter(error_correction_level),
        )


class QrPainter:
    """Draws a QR grid as dots with ring-and-dot finder eyes.

    Args:
        data: String to encode.
        version: QR version 1-40, or -1 for the smallest that fits.
        error_correction_level: ``ECCLevel`` or L/M/Q/H.
        color: Colour of dots and eyes.
        empty_color: Optional background fill.
        on_error: Called once with the ``EncodeFailure`` if encoding fails.
        gapless: Enlarge modules by one pixel to hide seams.
    """

    def __init__(
        self,
        data: str,
        version: int = AUTO_VERSION,
        error_correction_level="L",
        color=DEFAULT_COLOR,
        empty_color=None,
        on_error: ErrorCallback | None = None,
        gapless: bool = False,
    ):
        config = RenderConfig.build(color, empty_color, gapless, version, error_correction_level)
        self._setup(config, encode_grid(data, version, error_correction_level), on_error)

    @classmethod
    def from_grid(cls, grid: ModuleGrid, error_correction_level="L", color=DEFAULT_COLOR,
                  empty_color=None, gapless: bool = False) -> "QrPainter":
        """Wrap a grid produced by any external encoder."""
        painter = cls.__new__(cls)
        version = grid.version or AUTO_VERSION
        config = RenderConfig.build(color, empty_color, gapless, version, error_correction_level)
        painter._setup(config, grid, None)
        return painter

    @classmethod
    def create(cls, data: str, **kwargs) -> "QrPainter | EncodeFailure":
        """Like the constructor, but hand back the failure instead of a dead painter."""
        if "on_error" in kwargs:
            raise TypeError("create() returns the failure; on_error is not accepted")
        painter = cls(data, **kwargs)
        return painter.failure if painter.has_failed else painter

    def _setup(self, config: RenderConfig, result, on_error: ErrorCallback | None) -> None:
        self.config = config
        self._grid: ModuleGrid | None = None
        self._failure: EncodeFailure | None = None
        self._has_failed = False

        if isinstance(result, EncodeFailure):
            self._has_failed = True
            self._failure = result
            if on_error is not None:
                on_error(result)
        else:
            self._grid = result

    # -- state ---------------------------------------------------------------

    @property
    def has_failed(self) -> bool:
        return self._has_failed

    @property
    def failure(self) -> EncodeFailure | None:
        return self._failure

    @property
    def grid(self) -> ModuleGrid | None:
        return self._grid

    @property
    def color(self):
        return self.config.color

    @property
    def version(self) -> int:
        return self.config.version

    @property
    def error_correction_level(self) -> str:
        return self.config.error_correction_level

    def module_size(self, size) -> float:
        if self._grid is None:
            raise RenderError(f"No grid to measure: {self._failure}")
        return module_size(shortest_side(size), self._grid.size, self.config.gapless)

    # -- drawing -------------------------------------------------------------

    def render(self, surface: RenderSurface, size) -> None:
        """Draw onto ``surface``; ``size`` is ``(width, height)`` or one square dimension."""
        if self._has_failed:
            return

        target = shortest_side(size)
        if target == 0:
            emit(log, logging.WARNING, "render.zero_size",
                 hint="width or height is zero; give the painter a non-zero size")

        if self.config.empty_color is not None:
            surface.fill_background(self.config.empty_color)

        m = module_size(target, self._grid.size, self.config.gapless)
        dots = paint_modules(surface, self._grid, m, self.config.color)
        paint_finder_eyes(surface, self._grid.size, m, self.config.color)
        emit(log, logging.DEBUG, "painter.rendered",
             target=target, module_size=round(m, 3), dots=dots)

    def should_repaint(self, old) -> bool:
        """False only when colour, level, version and grid all match ``old``."""
        if not isinstance(old, QrPainter):
            return True
        return (
            self.color != old.color
            or self.error_correction_level != old.error_correction_level
            or self.version != old.version
            or self._grid != old._grid
        )

    # -- export --------------------------------------------------------------

    def to_picture(self, size: float) -> Picture:
        """Record the draw sequence for a ``size`` x ``size`` canvas. Empty for a failed painter."""
        recorder = RecordingSurface()
        self.render(recorder, (size, size))
        return recorder.end_recording(size, size)

    @trace
    def to_image(self, size: float, supersample: int = DEFAULT_SUPERSAMPLE) -> Image.Image:
        """Drawn at logical size and clipped to ``int(size)`` pixels square."""
        px = int(size)
        return self.to_picture(size).to_image(px, px, supersample=supersample, scale=1.0)

    @trace
    def to_image_data(self, size: float, format: ImageFormat = ImageFormat.PNG,
                      supersample: int = DEFAULT_SUPERSAMPLE) -> bytes:
        """Rasterize at ``size`` px square and serialize it in ``format``."""
        image = self.to_image(size, supersample=supersample)
        data = encode_image(image, format)
        audit("painter.exported", logger=log, size=int(size), format=format.value, bytes=len(data))
        return data

    async def to_image_data_async(self, size: float, format: ImageFormat = ImageFormat.PNG,
                                  supersample: int = DEFAULT_SUPERSAMPLE) -> bytes:
        """Drawing is recorded synchronously; rasterizing and encoding run in a worker thread."""
        picture = self.to_picture(size)
        px = int(size)

        def _rasterize_and_encode() -> bytes:
            return encode_image(picture.to_image(px, px, supersample=supersample, scale=1.0), format)

        return await asyncio.to_thread(_rasterize_and_encode)
