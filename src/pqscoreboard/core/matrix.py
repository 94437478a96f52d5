"""
Score Matrix

Teams, categories and the dense team-by-category grid of decimal scores.
Totals are always derived from the grid, never stored.
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .errors import (
    DuplicateNameError,
    IndexOutOfRangeError,
    InvalidNameError,
    InvalidScoreError,
    ShapeMismatchError,
)

logger = logging.getLogger(__name__)

ScoreValue = Union[Decimal, int, float, str]

# Decimal point, optional leading sign, no exponent, no thousands separators
SCORE_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

ZERO = Decimal(0)


def parse_score(text: str) -> Decimal:
    """
    Parse a score written with a decimal point and optional sign.

    Args:
        text: Score text, e.g. "12", "-3.5", "+.25"

    Returns:
        Parsed decimal value

    Raises:
        InvalidScoreError: if the text is not a plain decimal number
    """
    stripped = text.strip() if isinstance(text, str) else ""
    if not SCORE_PATTERN.match(stripped):
        raise InvalidScoreError(f"'{text}' is not a valid score")
    return Decimal(stripped)


def to_score(value: ScoreValue) -> Decimal:
    """Convert a caller-supplied value to a finite Decimal score."""
    if isinstance(value, bool):
        raise InvalidScoreError(f"'{value}' is not a valid score")
    if isinstance(value, str):
        return parse_score(value)
    try:
        if isinstance(value, float):
            score = Decimal(repr(value))
        else:
            score = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidScoreError(f"'{value}' is not a valid score") from None
    if not score.is_finite():
        raise InvalidScoreError(f"'{value}' is not a finite score")
    return score


@dataclass(frozen=True)
class Team:
    """A participant, identified by its position in the scoreboard."""
    index: int
    name: str


@dataclass(frozen=True)
class Category:
    """A scoring dimension, identified by its position in the scoreboard."""
    index: int
    name: str


def _check_name(name: str, existing: Iterable[str], kind: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError(f"{kind} name must not be empty")
    if name in existing:
        raise DuplicateNameError(f"{kind} '{name}' already exists")


class ScoreMatrix:
    """
    Scoreboard data model.

    Holds an ordered list of teams, an ordered list of categories and a
    grid of scores indexed [team][category]. The grid always has exactly
    team_count x category_count cells. Teams and categories can only be
    appended; each append either fully succeeds or leaves the matrix as
    it was.
    """

    def __init__(self, team_count: int = 0, category_count: int = 0):
        """
        Create a scoreboard with default names and zero scores.

        Args:
            team_count: Initial number of teams ("Team 1", "Team 2", ...)
            category_count: Initial number of categories ("Category 1", ...)
        """
        if team_count < 0 or category_count < 0:
            raise ValueError("team and category counts must not be negative")

        self._teams: List[str] = [f"Team {i + 1}" for i in range(team_count)]
        self._categories: List[str] = [f"Category {j + 1}" for j in range(category_count)]
        self._scores: List[List[Decimal]] = [
            [ZERO] * category_count for _ in range(team_count)
        ]

    @classmethod
    def from_names(
        cls,
        teams: Sequence[str],
        categories: Sequence[str],
        scores: Optional[Sequence[Sequence[ScoreValue]]] = None,
    ) -> "ScoreMatrix":
        """
        Build a fully populated scoreboard.

        Args:
            teams: Team names in order
            categories: Category names in order
            scores: Rows of scores per team, one value per category
                (default: all zero)

        Raises:
            InvalidNameError, DuplicateNameError: on bad names
            ShapeMismatchError: if scores do not match the name lists
            InvalidScoreError: if a score is not a finite decimal
        """
        seen: List[str] = []
        for name in teams:
            _check_name(name, seen, "Team")
            seen.append(name)
        seen = []
        for name in categories:
            _check_name(name, seen, "Category")
            seen.append(name)

        if scores is None:
            grid = [[ZERO] * len(categories) for _ in teams]
        else:
            if len(scores) != len(teams):
                raise ShapeMismatchError(
                    f"expected scores for {len(teams)} teams, got {len(scores)}"
                )
            grid = []
            for team, row in zip(teams, scores):
                if len(row) != len(categories):
                    raise ShapeMismatchError(
                        f"expected {len(categories)} scores for team '{team}', got {len(row)}"
                    )
                grid.append([to_score(value) for value in row])

        matrix = cls()
        matrix._teams = list(teams)
        matrix._categories = list(categories)
        matrix._scores = grid
        return matrix

    # ============ Shape ============

    @property
    def team_count(self) -> int:
        return len(self._teams)

    @property
    def category_count(self) -> int:
        return len(self._categories)

    @property
    def is_valid(self) -> bool:
        """True when the scoreboard has at least one team and one category."""
        return self.team_count >= 1 and self.category_count >= 1

    def _check_team(self, team_index: int) -> None:
        if not isinstance(team_index, int) or not 0 <= team_index < self.team_count:
            raise IndexOutOfRangeError(
                f"team index {team_index} out of range (0..{self.team_count - 1})"
            )

    def _check_category(self, category_index: int) -> None:
        if not isinstance(category_index, int) or not 0 <= category_index < self.category_count:
            raise IndexOutOfRangeError(
                f"category index {category_index} out of range (0..{self.category_count - 1})"
            )

    # ============ Mutations ============

    def add_team(self, name: str) -> Team:
        """
        Append a team with a zero score in every existing category.

        Raises:
            InvalidNameError: if name is empty or whitespace-only
            DuplicateNameError: if a team with this exact name exists
        """
        _check_name(name, self._teams, "Team")
        self._scores.append([ZERO] * self.category_count)
        self._teams.append(name)
        logger.debug(f"Added team '{name}'")
        return Team(self.team_count - 1, name)

    def add_category(self, name: str, initial_scores: Sequence[ScoreValue]) -> Category:
        """
        Append a category with one initial score per team.

        Args:
            name: Category name
            initial_scores: One score per existing team, in team order

        Raises:
            InvalidNameError, DuplicateNameError: on bad names
            ShapeMismatchError: if the score count differs from team_count
            InvalidScoreError: if a score is not a finite decimal
        """
        _check_name(name, self._categories, "Category")
        if len(initial_scores) != self.team_count:
            raise ShapeMismatchError(
                f"expected {self.team_count} scores, got {len(initial_scores)}"
            )
        values = [to_score(value) for value in initial_scores]

        for row, value in zip(self._scores, values):
            row.append(value)
        self._categories.append(name)
        logger.debug(f"Added category '{name}'")
        return Category(self.category_count - 1, name)

    def set_score(self, team_index: int, category_index: int, value: ScoreValue) -> bool:
        """
        Replace one score.

        Returns:
            True if the stored value changed
        """
        self._check_team(team_index)
        self._check_category(category_index)
        score = to_score(value)

        if self._scores[team_index][category_index] == score:
            return False
        self._scores[team_index][category_index] = score
        return True

    # ============ Reads ============

    def get_score(self, team_index: int, category_index: int) -> Decimal:
        self._check_team(team_index)
        self._check_category(category_index)
        return self._scores[team_index][category_index]

    def get_total_score(self, team_index: int) -> Decimal:
        """Sum of a team's scores over all categories."""
        self._check_team(team_index)
        return sum(self._scores[team_index], ZERO)

    def team_name(self, team_index: int) -> str:
        self._check_team(team_index)
        return self._teams[team_index]

    def category_name(self, category_index: int) -> str:
        self._check_category(category_index)
        return self._categories[category_index]

    def teams(self) -> Tuple[Team, ...]:
        return tuple(Team(i, name) for i, name in enumerate(self._teams))

    def categories(self) -> Tuple[Category, ...]:
        return tuple(Category(j, name) for j, name in enumerate(self._categories))

    def scores(self) -> Tuple[Tuple[Decimal, ...], ...]:
        """Snapshot of the full grid, indexed [team][category]."""
        return tuple(tuple(row) for row in self._scores)

    def totals(self) -> Tuple[Decimal, ...]:
        return tuple(self.get_total_score(i) for i in range(self.team_count))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON responses. Scores are strings."""
        return {
            "teams": list(self._teams),
            "categories": list(self._categories),
            "scores": [[str(value) for value in row] for row in self._scores],
            "totals": [str(total) for total in self.totals()],
            "valid": self.is_valid,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScoreMatrix):
            return NotImplemented
        return (
            self._teams == other._teams
            and self._categories == other._categories
            and self._scores == other._scores
        )

    def __repr__(self) -> str:
        return f"ScoreMatrix(teams={self._teams!r}, categories={self._categories!r})"
