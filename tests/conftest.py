"""Shared fixtures for the PQScoreboard tests."""

import pytest

from pqscoreboard.config import Config, set_config
from pqscoreboard.core.matrix import ScoreMatrix
from pqscoreboard.output.base import RecordingSurface
from pqscoreboard.reveal.sequencer import RevealSequencer


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from built-in defaults, ignoring any user config."""
    config = Config()
    set_config(config)
    yield config
    set_config(Config())


@pytest.fixture
def matrix():
    """Teams A, B; categories X, Y; scores A=[1, 2], B=[3, 4]."""
    return ScoreMatrix.from_names(["A", "B"], ["X", "Y"], [[1, 2], [3, 4]])


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def sleeps():
    """Delays requested by inline sequencers."""
    return []


@pytest.fixture
def make_sequencer(sleeps):
    """Build sequencers that play back inline in the calling thread."""
    def factory(**kwargs):
        kwargs.setdefault("spawn", lambda play: play())
        kwargs.setdefault("sleep", sleeps.append)
        return RevealSequencer(**kwargs)
    return factory
