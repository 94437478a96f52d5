"""
CSV Scoreboard Format

Layout (teams across, categories down, like the editor grid):

    Category,Team A,Team B
    Round 1,10,7.5
    Round 2,3,-1

The first header cell must be "Category"; it marks the first column as the
category axis. Scores use a decimal point and an optional sign.
"""

import csv
import io
import logging
from typing import BinaryIO, List

from ..core.errors import FormatError, ScoreboardError
from ..core.matrix import ScoreMatrix, parse_score
from .base import ScoreboardRepository, register_repository

logger = logging.getLogger(__name__)

HEADER = "Category"
ENCODING = "utf-8"


def format_score(value) -> str:
    """Format a Decimal without exponent notation."""
    return format(value, "f")


class CsvRepository(ScoreboardRepository):
    """Comma-separated scoreboard files."""

    name = "CSV"
    extensions = (".csv",)

    def load(self, stream: BinaryIO) -> ScoreMatrix:
        try:
            text = stream.read().decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"CSV file is not valid UTF-8: {e}") from None

        try:
            rows = [row for row in csv.reader(io.StringIO(text, newline="")) if row]
        except csv.Error as e:
            raise FormatError(f"Malformed CSV: {e}") from None

        if not rows:
            raise FormatError("CSV file is empty")

        header = rows[0]
        if header[0].strip().lower() != HEADER.lower():
            raise FormatError(f"First header cell must be '{HEADER}', got '{header[0]}'")
        teams = header[1:]
        width = len(header)

        categories: List[str] = []
        by_category: List[list] = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) != width:
                raise FormatError(f"Row {line_no}: expected {width} cells, got {len(row)}")
            categories.append(row[0])
            values = []
            for team, cell in zip(teams, row[1:]):
                try:
                    values.append(parse_score(cell))
                except ScoreboardError:
                    raise FormatError(
                        f"Row {line_no}: '{cell}' is not a valid score for team '{team}'"
                    ) from None
            by_category.append(values)

        # Transpose category rows into team rows
        scores = [[values[i] for values in by_category] for i in range(len(teams))]

        try:
            return ScoreMatrix.from_names(teams, categories, scores)
        except ScoreboardError as e:
            raise FormatError(f"Invalid scoreboard: {e}") from None

    def save(self, matrix: ScoreMatrix, stream: BinaryIO) -> None:
        buffer = io.StringIO(newline="")
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([HEADER] + [team.name for team in matrix.teams()])

        grid = matrix.scores()
        for category in matrix.categories():
            writer.writerow(
                [category.name] + [format_score(row[category.index]) for row in grid]
            )

        stream.write(buffer.getvalue().encode(ENCODING))


register_repository(CsvRepository())
