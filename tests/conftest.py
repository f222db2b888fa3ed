import logging

import pytest

from qrpainter.encoder import ModuleGrid, encode_grid
from qrpainter.surface import RecordingSurface


@pytest.fixture
def hello_grid() -> ModuleGrid:
    grid = encode_grid("HELLO", version=1, ecc="L")
    assert isinstance(grid, ModuleGrid)
    return grid


@pytest.fixture
def recorder() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("qrpainter")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
