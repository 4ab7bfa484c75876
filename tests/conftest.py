import logging
import numpy as np
import pytest
from pixstack.kernel.system.logging import setup_logging

setup_logging(level=logging.DEBUG)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_raster(rng):
    return rng.integers(0, 256, size=(37, 23, 4), dtype=np.uint8)


@pytest.fixture
def all_values_raster():
    # Every 8-bit value in every channel
    vals = np.arange(256, dtype=np.uint8)
    return np.ascontiguousarray(np.stack([vals, vals[::-1], vals, vals[::-1]], axis=-1).reshape(16, 16, 4))
