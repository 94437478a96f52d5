"""
Editor Controller

Command handlers behind the editor UI. Each handler validates its input,
applies it to the session and returns a CommandResult; failures leave the
session unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, Optional, Sequence

from ..config import get_config
from ..core.errors import InvalidStateError, ScoreboardError
from ..core.matrix import ScoreMatrix, parse_score
from ..core.session import ScoreboardSession
from ..output.base import PresentationSurface
from ..reveal.sequencer import RevealOptions, RevealSequencer, RevealState
from ..storage import get_repository

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Σ"


@dataclass
class CommandResult:
    """Outcome of an editor command."""
    ok: bool
    message: str = ""
    error_type: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result = {"status": "ok" if self.ok else "error", "message": self.message}
        if self.error_type:
            result["error_type"] = self.error_type
        result.update(self.data)
        return result


def _failed(action: str, error: Exception) -> CommandResult:
    logger.warning(f"Failed to {action}: {error}")
    return CommandResult(False, f"Failed to {action}: {error}", type(error).__name__)


class EditorController:
    """
    Mediates editor actions to the session's scoreboard and reveal.

    Args:
        session: The live session
        sequencer_factory: Builds a new RevealSequencer for each reveal
    """

    def __init__(self, session: ScoreboardSession,
                 sequencer_factory: Optional[Callable[[], RevealSequencer]] = None):
        self.session = session
        self._sequencer_factory = sequencer_factory or self._default_sequencer

    def _default_sequencer(self) -> RevealSequencer:
        return RevealSequencer(on_change=lambda seq: self.session.notify())

    def _require_open(self) -> ScoreMatrix:
        matrix = self.session.matrix
        if matrix is None:
            raise InvalidStateError("No scoreboard is open")
        return matrix

    # ============ Document ============

    def new_scoreboard(self, team_count: int, category_count: int) -> CommandResult:
        try:
            matrix = ScoreMatrix(int(team_count), int(category_count))
        except (TypeError, ValueError) as e:
            return _failed("create new scoreboard", e)
        self.session.replace(matrix)
        return CommandResult(True, "Scoreboard created")

    def open_stream(self, stream: BinaryIO, filename: str = "") -> CommandResult:
        try:
            matrix = get_repository(filename).load(stream)
        except ScoreboardError as e:
            return _failed("open scoreboard", e)
        self.session.replace(matrix, filename or None)
        return CommandResult(True, f"Opened {filename or 'scoreboard'}")

    def open_file(self, path: str) -> CommandResult:
        try:
            matrix = get_repository(path).load_file(path)
        except (ScoreboardError, OSError) as e:
            return _failed("open scoreboard", e)
        self.session.replace(matrix, path)
        return CommandResult(True, f"Opened {path}")

    def save_stream(self, stream: BinaryIO, filename: str = "") -> CommandResult:
        try:
            get_repository(filename).save(self._require_open(), stream)
        except ScoreboardError as e:
            return _failed("save scoreboard", e)
        return CommandResult(True, "Scoreboard saved")

    def save_file(self, path: Optional[str] = None) -> CommandResult:
        path = path or self.session.path
        try:
            if not path:
                raise InvalidStateError("No file name given")
            get_repository(path).save_file(self._require_open(), path)
        except (ScoreboardError, OSError) as e:
            return _failed("save scoreboard", e)
        self.session.set_path(path)
        return CommandResult(True, f"Saved {path}")

    def close(self) -> CommandResult:
        self.session.close()
        return CommandResult(True, "Scoreboard closed")

    # ============ Editing ============

    def add_team(self, name: str) -> CommandResult:
        try:
            team = self._require_open().add_team(name)
        except ScoreboardError as e:
            return _failed("add team", e)
        self.session.notify()
        return CommandResult(True, f"Added team '{team.name}'", data={"team_index": team.index})

    def add_category(self, name: str, scores: Sequence) -> CommandResult:
        try:
            category = self._require_open().add_category(name, scores)
        except ScoreboardError as e:
            return _failed("add category", e)
        self.session.notify()
        return CommandResult(True, f"Added category '{category.name}'",
                             data={"category_index": category.index})

    def set_score(self, team_index: int, category_index: int, value) -> CommandResult:
        """Set one score; on change the result carries the team's new total."""
        try:
            matrix = self._require_open()
            changed = matrix.set_score(team_index, category_index, value)
        except ScoreboardError as e:
            return _failed("set score", e)

        data: Dict[str, Any] = {"changed": changed}
        if changed:
            data["total"] = str(matrix.get_total_score(team_index))
            self.session.notify()
        return CommandResult(True, "Score updated" if changed else "Score unchanged", data=data)

    def set_score_text(self, team_index: int, category_index: int, text: str) -> CommandResult:
        """Set one score from text typed into the grid."""
        try:
            matrix = self._require_open()
            team = matrix.team_name(team_index)
            category = matrix.category_name(category_index)
        except ScoreboardError as e:
            return _failed("set score", e)

        try:
            value = parse_score(text)
        except ScoreboardError:
            result = CommandResult(
                False,
                f"Failed to set score for team '{team}' for category '{category}': "
                f"'{text}' is not a valid score.",
                "InvalidScoreError",
                data={"value": str(matrix.get_score(team_index, category_index))},
            )
            logger.warning(result.message)
            return result
        return self.set_score(team_index, category_index, value)

    # ============ Views ============

    def capabilities(self) -> Dict[str, bool]:
        """Which editor actions are currently available."""
        matrix = self.session.matrix
        reveal = self.session.reveal
        running = reveal is not None and reveal.state is RevealState.RUNNING
        return {
            "can_edit": matrix is not None,
            "can_save": matrix is not None,
            "can_reveal": matrix is not None and matrix.is_valid and not running,
            "can_cancel": running,
        }

    def grid(self) -> Optional[dict]:
        """Editor grid: categories down, teams across, totals row last."""
        matrix = self.session.matrix
        if matrix is None:
            return None
        scores = matrix.scores()
        rows = [
            {"label": category.name,
             "cells": [str(scores[team.index][category.index]) for team in matrix.teams()]}
            for category in matrix.categories()
        ]
        rows.append({"label": TOTAL_LABEL, "cells": [str(t) for t in matrix.totals()],
                     "read_only": True})
        return {"columns": [team.name for team in matrix.teams()], "rows": rows}

    # ============ Reveal ============

    def start_reveal(self, surface: PresentationSurface,
                     inter_step_delay: Optional[float] = None,
                     show_running_totals: Optional[bool] = None) -> CommandResult:
        """Start a new reveal of the open scoreboard on a surface."""
        config = get_config().reveal
        try:
            matrix = self._require_open()
            current = self.session.reveal
            if current is not None and current.state is RevealState.RUNNING:
                raise InvalidStateError("A reveal is already running")

            options = RevealOptions(
                inter_step_delay=config.inter_step_delay if inter_step_delay is None
                else float(inter_step_delay),
                show_running_totals=config.show_running_totals if show_running_totals is None
                else bool(show_running_totals),
                target_surface=surface,
            )
            sequencer = self._sequencer_factory()
            # listeners notified from start() must already see this reveal
            self.session.set_reveal(sequencer, notify=False)
            try:
                sequencer.start(matrix, options)
            except Exception:
                self.session.set_reveal(current, notify=sequencer.state is not RevealState.IDLE)
                raise
        except (ScoreboardError, ValueError) as e:
            return _failed("start reveal", e)
        self.session.notify()
        return CommandResult(True, "Reveal started", data={"reveal": sequencer.to_dict()})

    def cancel_reveal(self) -> CommandResult:
        reveal = self.session.reveal
        try:
            if reveal is None:
                raise InvalidStateError("No reveal has been started")
            reveal.cancel()
        except ScoreboardError as e:
            return _failed("cancel reveal", e)
        return CommandResult(True, "Reveal cancelled", data={"reveal": reveal.to_dict()})
