"""
Scoreboard Errors

All failures raised by the score model, the file formats and the reveal
engine derive from ScoreboardError.
"""


class ScoreboardError(Exception):
    """Base class for all scoreboard errors."""


class InvalidNameError(ScoreboardError, ValueError):
    """Team or category name is empty or whitespace-only."""


class DuplicateNameError(ScoreboardError, ValueError):
    """Team or category name already exists."""


class ShapeMismatchError(ScoreboardError, ValueError):
    """Number of supplied scores does not match the number of teams."""


class IndexOutOfRangeError(ScoreboardError, IndexError):
    """Team or category index is outside the current grid."""


class FormatError(ScoreboardError, ValueError):
    """Malformed scoreboard file."""


class NotPresentableError(ScoreboardError):
    """Scoreboard cannot be revealed (no teams or no categories)."""


class InvalidStateError(ScoreboardError):
    """Reveal operation called in the wrong state."""


class InvalidScoreError(ScoreboardError, ValueError):
    """Score is not a finite decimal number."""
