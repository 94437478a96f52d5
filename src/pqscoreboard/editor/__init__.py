"""PQScoreboard Editor"""

from .controller import CommandResult, EditorController

__all__ = ["CommandResult", "EditorController"]
