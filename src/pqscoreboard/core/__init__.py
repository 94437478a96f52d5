"""PQScoreboard Core Components"""

from .errors import (
    ScoreboardError,
    InvalidNameError,
    DuplicateNameError,
    ShapeMismatchError,
    IndexOutOfRangeError,
    InvalidScoreError,
    FormatError,
    NotPresentableError,
    InvalidStateError,
)
from .matrix import ScoreMatrix, Team, Category, parse_score
from .session import ScoreboardSession

__all__ = [
    "ScoreboardError", "InvalidNameError", "DuplicateNameError",
    "ShapeMismatchError", "IndexOutOfRangeError", "InvalidScoreError",
    "FormatError", "NotPresentableError", "InvalidStateError",
    "ScoreMatrix", "Team", "Category", "parse_score", "ScoreboardSession",
]
