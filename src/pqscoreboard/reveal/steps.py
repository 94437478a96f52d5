"""
Reveal Steps

Builds the ordered list of disclosure steps for a scoreboard. The order
depends only on the stored team and category order, never on the scores.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from ..core.errors import NotPresentableError
from ..core.matrix import ScoreMatrix, ZERO


class StepKind(str, Enum):
    SCORE = "score"
    RUNNING_TOTALS = "running_totals"
    TOTAL = "total"


@dataclass(frozen=True)
class RevealStep:
    """
    One unit of disclosure.

    SCORE steps carry one team's score in one category. RUNNING_TOTALS
    steps carry the cumulative totals of every team after a category.
    TOTAL steps carry one team's final total.
    """
    index: int
    kind: StepKind
    team_index: Optional[int] = None
    team_name: Optional[str] = None
    category_index: Optional[int] = None
    category_name: Optional[str] = None
    value: Optional[Decimal] = None
    totals: Tuple[Decimal, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for the presentation page."""
        return {
            "index": self.index,
            "kind": self.kind.value,
            "team_index": self.team_index,
            "team": self.team_name,
            "category_index": self.category_index,
            "category": self.category_name,
            "value": str(self.value) if self.value is not None else None,
            "totals": [str(total) for total in self.totals],
        }


def build_steps(matrix: ScoreMatrix, show_running_totals: bool = False) -> Tuple[RevealStep, ...]:
    """
    Snapshot a scoreboard into its reveal sequence.

    Order: for each category, one SCORE step per team; optionally one
    RUNNING_TOTALS step after each category; then one TOTAL step per team.

    Raises:
        NotPresentableError: if the scoreboard has no teams or no categories
    """
    if not matrix.is_valid:
        raise NotPresentableError(
            f"Scoreboard needs at least one team and one category "
            f"(has {matrix.team_count} teams, {matrix.category_count} categories)"
        )

    teams = matrix.teams()
    grid = matrix.scores()
    running = [ZERO] * len(teams)
    steps: List[RevealStep] = []

    for category in matrix.categories():
        for team in teams:
            value = grid[team.index][category.index]
            running[team.index] += value
            steps.append(RevealStep(
                index=len(steps),
                kind=StepKind.SCORE,
                team_index=team.index,
                team_name=team.name,
                category_index=category.index,
                category_name=category.name,
                value=value,
            ))
        if show_running_totals:
            steps.append(RevealStep(
                index=len(steps),
                kind=StepKind.RUNNING_TOTALS,
                category_index=category.index,
                category_name=category.name,
                totals=tuple(running),
            ))

    for team in teams:
        steps.append(RevealStep(
            index=len(steps),
            kind=StepKind.TOTAL,
            team_index=team.index,
            team_name=team.name,
            value=matrix.get_total_score(team.index),
        ))

    return tuple(steps)
