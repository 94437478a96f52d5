"""
Scoreboard Repository Interface

A repository converts a ScoreMatrix to and from a byte stream.
"""

import logging
import os
from typing import BinaryIO, Dict, Tuple

from ..core.matrix import ScoreMatrix

logger = logging.getLogger(__name__)


class ScoreboardRepository:
    """
    Base class for scoreboard file formats.

    Subclasses implement load() and save(). save() followed by load()
    reproduces an equal ScoreMatrix. load() raises FormatError on
    malformed input and never returns a partially populated matrix.
    """

    name: str = ""
    extensions: Tuple[str, ...] = ()

    def load(self, stream: BinaryIO) -> ScoreMatrix:
        raise NotImplementedError

    def save(self, matrix: ScoreMatrix, stream: BinaryIO) -> None:
        raise NotImplementedError

    def load_file(self, path: str) -> ScoreMatrix:
        with open(path, "rb") as f:
            matrix = self.load(f)
        logger.info(f"Loaded {self.name} scoreboard from {path}")
        return matrix

    def save_file(self, matrix: ScoreMatrix, path: str) -> None:
        with open(path, "wb") as f:
            self.save(matrix, f)
        logger.info(f"Saved {self.name} scoreboard to {path}")


_registry: Dict[str, ScoreboardRepository] = {}


def register_repository(repository: ScoreboardRepository) -> None:
    """Register a repository for each of its file extensions."""
    for ext in repository.extensions:
        _registry[ext.lower()] = repository


def get_repository(filename: str = "") -> ScoreboardRepository:
    """
    Pick the repository for a file name by extension.

    Unknown or missing extensions fall back to CSV.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    return _registry.get(ext) or _registry[".csv"]


def supported_extensions() -> Tuple[str, ...]:
    return tuple(sorted(_registry))
