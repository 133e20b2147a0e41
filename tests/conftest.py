import os
import random
import sys

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

# Ensure the project root is on the path so modules can be imported in tests
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from loaders.core import Context
from loaders.pattern_table import PatternTable
from render.dual_grid import DualGridLayer, RecordingSink
from state.event_bus import EVENT_BUS


@pytest.fixture(autouse=True)
def _reset_event_bus():
    """Isolate global event subscriptions between tests."""

    EVENT_BUS.reset()
    yield
    EVENT_BUS.reset()


@pytest.fixture
def rng():
    """Return a deterministic random number generator."""

    return random.Random(0)


@pytest.fixture
def repo_context():
    """Context resolving the manifests shipped in ``assets/``."""

    return Context(repo_root=ROOT, search_paths=["assets"])


@pytest.fixture
def pattern_table_3():
    """Complete 3-state table laid out like the artist template."""

    return PatternTable.systematic(3, 9)


@pytest.fixture
def pattern_table_2():
    return PatternTable.systematic(2, 4)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def make_layer(pattern_table_3):
    """Return a factory for :class:`DualGridLayer` objects.

    The layer uses the 3-state systematic table and a :class:`RecordingSink`
    unless told otherwise.  ``fill`` pre-fills the grid silently.
    """

    def _factory(width=10, height=10, table=pattern_table_3, fill=None, name="layer", **kwargs):
        layer = DualGridLayer.create(name, width, height, table, **kwargs)
        if fill is not None:
            layer.grid.fill(fill)
        return layer

    return _factory
