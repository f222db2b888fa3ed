"""Scan check for rendered output: decode an image with ZBar and OpenCV."""

import time
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from qrpainter.logging import audit, get_logger, trace

log = get_logger("verify")

NO_QR = "No QR code detected"


@dataclass
class ScanResult:
    """Result of a single scan attempt."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = ""
    error: str | None = None


def _flatten(image: Image.Image) -> Image.Image:
    # Transparent pixels decode as black otherwise.
    if image.mode in ("RGBA", "LA"):
        background = Image.new("RGBA", image.size, (255, 255, 255, 255))
        background.alpha_composite(image.convert("RGBA"))
        return background.convert("RGB")
    return image.convert("RGB")


def _run(decoder: str, fn, image: Image.Image) -> ScanResult:
    start = time.perf_counter()
    try:
        data = fn(image)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder=decoder, error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error=str(e))

    elapsed = (time.perf_counter() - start) * 1000
    audit("scan.verified", logger=log, decoder=decoder, success=bool(data),
          time_ms=round(elapsed, 1), data=(data or NO_QR)[:80])
    if data:
        return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed, decoder=decoder)
    return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error=NO_QR)


def _decode_zbar(image: Image.Image) -> str | None:
    results = pyzbar_decode(image)
    if results:
        return results[0].data.decode("utf-8", errors="replace")
    return None


def _decode_opencv(image: Image.Image) -> str | None:
    gray = cv2.cvtColor(np.array(image), cv2.COLOR_RGB2GRAY)
    data, _, _ = cv2.QRCodeDetector().detectAndDecode(gray)
    return data or None


@trace
def scan_pyzbar(image: Image.Image) -> ScanResult:
    return _run("pyzbar/zbar", _decode_zbar, _flatten(image))


@trace
def scan_opencv(image: Image.Image) -> ScanResult:
    return _run("opencv", _decode_opencv, _flatten(image))


@trace
def verify(image: Image.Image, expected_data: str | None = None) -> list[ScanResult]:
    """Run every decoder on ``image``.

    Args:
        image: Rendered QR image (transparency is flattened onto white).
        expected_data: If given, a decode that doesn't match counts as a failure.

    Returns:
        One ScanResult per decoder.
    """
    results = []
    for scanner in (scan_pyzbar, scan_opencv):
        result = scanner(image)
        if result.success and expected_data is not None and result.decoded_data != expected_data:
            result.success = False
            result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected_data}'"
        results.append(result)
    return results
