import pytest
import structlog

from pentatile.config import SINGLE_STAR, SMALL_PATCH
from pentatile.world import TilingWorld


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture()
def star_world():
    """One line per family: ten tiles, all mutually reachable."""
    return TilingWorld.from_config(SINGLE_STAR)


@pytest.fixture()
def small_world():
    """Three lines per family, every pair crossing inside the bounds."""
    return TilingWorld.from_config(SMALL_PATCH)
