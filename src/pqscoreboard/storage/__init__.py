"""PQScoreboard File Formats"""

from .base import ScoreboardRepository, get_repository, supported_extensions
from .csv_handler import CsvRepository
from .json_handler import JsonRepository

__all__ = [
    "ScoreboardRepository", "get_repository", "supported_extensions",
    "CsvRepository", "JsonRepository",
]
