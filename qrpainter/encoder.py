"""Module grid production: wraps the ``qrcode`` encoder and turns its rejections into typed failures."""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import qrcode
import qrcode.constants
import qrcode.exceptions

from qrpainter.logging import audit, get_logger, trace

log = get_logger("encoder")

AUTO_VERSION = -1
MIN_VERSION = 1
MAX_VERSION = 40


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


class FailureKind(Enum):
    DATA_TOO_LONG = "data_too_long"
    INVALID_VERSION = "invalid_version"
    INVALID_CONFIGURATION = "invalid_configuration"


@dataclass(frozen=True)
class EncodeFailure:
    """Why the encoder refused the input. Returned, never raised."""
    kind: FailureKind
    reason: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.reason}"


@dataclass(frozen=True)
class ModuleGrid:
    """Immutable N x N matrix of modules, ``True`` = dark."""
    size: int
    modules: tuple[tuple[bool, ...], ...]

    @classmethod
    def from_matrix(cls, matrix) -> "ModuleGrid":
        """Build a grid from any square nested sequence or 2-D array of truthy values."""
        arr = np.asarray(matrix, dtype=bool)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValueError(f"Module matrix must be square, got shape {arr.shape}")
        if arr.shape[0] < 1:
            raise ValueError("Module matrix must have at least one module")
        rows = tuple(tuple(bool(v) for v in row) for row in arr.tolist())
        return cls(size=arr.shape[0], modules=rows)

    def is_dark(self, row: int, col: int) -> bool:
        return self.modules[row][col]

    @property
    def version(self) -> int | None:
        """QR version implied by the module count, or None for a non-standard size."""
        if self.size >= 21 and (self.size - 17) % 4 == 0:
            v = (self.size - 17) // 4
            if v <= MAX_VERSION:
                return v
        return None

    def as_array(self) -> np.ndarray:
        return np.array(self.modules, dtype=bool)


def _is_valid_version(version) -> bool:
    if not isinstance(version, int) or isinstance(version, bool):
        return False
    return version == AUTO_VERSION or MIN_VERSION <= version <= MAX_VERSION


def resolve_ecc(level) -> ECCLevel:
    """Accept an ``ECCLevel`` or its letter (case-insensitive)."""
    if isinstance(level, ECCLevel):
        return level
    return ECC_NAMES[str(level).upper()]


@trace
def encode_grid(data: str, version: int = AUTO_VERSION, ecc="L") -> ModuleGrid | EncodeFailure:
    """Encode ``data`` into a module grid.

    Args:
        data: The string to encode.
        version: QR version 1-40, or -1 to pick the smallest that fits.
        ecc: Error correction level, ``ECCLevel`` or one of L/M/Q/H.

    Returns:
        The ``ModuleGrid`` on success, otherwise an ``EncodeFailure``.
    """
    failure = None
    try:
        ecc_level = resolve_ecc(ecc)
    except KeyError:
        failure = EncodeFailure(FailureKind.INVALID_CONFIGURATION,
                                f"Unknown error correction level {ecc!r}")
    else:
        if not _is_valid_version(version):
            failure = EncodeFailure(FailureKind.INVALID_VERSION,
                                    f"Invalid version (was {version}, expected 1 to 40 or -1)")

    if failure is None:
        fixed = version != AUTO_VERSION
        try:
            qr = qrcode.QRCode(
                version=version if fixed else None,
                error_correction=ecc_level.value,
                box_size=1,
                border=0,
            )
            qr.add_data(data)
            qr.make(fit=not fixed)
        except qrcode.exceptions.DataOverflowError as e:
            failure = EncodeFailure(FailureKind.DATA_TOO_LONG, str(e))
        except (ValueError, TypeError) as e:
            failure = EncodeFailure(FailureKind.INVALID_CONFIGURATION, str(e))

    if failure is not None:
        audit("grid.failed", logger=log, data=data[:80] if isinstance(data, str) else type(data).__name__,
              version=version, ecc=ecc, kind=failure.kind.value, reason=failure.reason)
        return failure

    grid = ModuleGrid.from_matrix(qr.modules)
    audit("grid.encoded", logger=log,
          data=data[:80], version=qr.version, size=f"{grid.size}x{grid.size}", ecc=ecc_level.name)
    return grid
