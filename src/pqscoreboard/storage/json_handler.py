"""
JSON Scoreboard Format

    {"teams": ["A", "B"], "categories": ["C1"], "scores": [["1"], ["2.5"]]}

Scores are indexed [team][category] and written as strings so decimals
keep their exact value.
"""

import json
import logging
from typing import BinaryIO

from ..core.errors import FormatError, ScoreboardError
from ..core.matrix import ScoreMatrix
from .base import ScoreboardRepository, register_repository
from .csv_handler import ENCODING, format_score

logger = logging.getLogger(__name__)


class JsonRepository(ScoreboardRepository):
    """JSON scoreboard files."""

    name = "JSON"
    extensions = (".json",)

    def load(self, stream: BinaryIO) -> ScoreMatrix:
        try:
            data = json.loads(stream.read().decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"Malformed JSON: {e}") from None

        if not isinstance(data, dict):
            raise FormatError("JSON scoreboard must be an object")

        teams = data.get("teams")
        categories = data.get("categories")
        scores = data.get("scores")
        for key, value in (("teams", teams), ("categories", categories), ("scores", scores)):
            if not isinstance(value, list):
                raise FormatError(f"'{key}' must be a list")
        if not all(isinstance(row, list) for row in scores):
            raise FormatError("'scores' must be a list of lists")
        if not all(isinstance(name, str) for name in teams + categories):
            raise FormatError("team and category names must be strings")

        try:
            return ScoreMatrix.from_names(teams, categories, scores)
        except ScoreboardError as e:
            raise FormatError(f"Invalid scoreboard: {e}") from None

    def save(self, matrix: ScoreMatrix, stream: BinaryIO) -> None:
        data = {
            "teams": [team.name for team in matrix.teams()],
            "categories": [category.name for category in matrix.categories()],
            "scores": [[format_score(value) for value in row] for row in matrix.scores()],
        }
        stream.write(json.dumps(data, indent=2).encode(ENCODING))


register_repository(JsonRepository())
