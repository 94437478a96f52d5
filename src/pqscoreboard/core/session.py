"""
Scoreboard Session

The single live scoreboard being edited and presented. One session is
created by the application and handed to the editor and the web layer.
"""

import json
import logging
import threading
from typing import Callable, List, Optional, TYPE_CHECKING

from .matrix import ScoreMatrix

if TYPE_CHECKING:
    from ..reveal.sequencer import RevealSequencer

logger = logging.getLogger(__name__)


class ScoreboardSession:
    """
    Owner of the open scoreboard, its file path and the current reveal.

    The matrix is replaced wholesale on new/open and dropped on close;
    there is no partially torn down state.
    """

    def __init__(self, matrix: Optional[ScoreMatrix] = None):
        self._lock = threading.RLock()
        self._matrix = matrix
        self._path: Optional[str] = None
        self._reveal: Optional["RevealSequencer"] = None
        self._listeners: List[Callable[[], None]] = []

    @property
    def matrix(self) -> Optional[ScoreMatrix]:
        """Get the open scoreboard, or None when no document is open."""
        with self._lock:
            return self._matrix

    @property
    def path(self) -> Optional[str]:
        with self._lock:
            return self._path

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._matrix is not None

    @property
    def reveal(self) -> Optional["RevealSequencer"]:
        """Most recently started reveal, if any."""
        with self._lock:
            return self._reveal

    def replace(self, matrix: ScoreMatrix, path: Optional[str] = None) -> None:
        """Replace the open scoreboard (new or opened document)."""
        with self._lock:
            self._matrix = matrix
            self._path = path
        logger.info(f"Scoreboard replaced ({matrix.team_count} teams, "
                    f"{matrix.category_count} categories)")
        self.notify()

    def set_path(self, path: Optional[str]) -> None:
        with self._lock:
            self._path = path

    def close(self) -> None:
        """Drop the open scoreboard."""
        with self._lock:
            self._matrix = None
            self._path = None
        logger.info("Scoreboard closed")
        self.notify()

    def set_reveal(self, sequencer: Optional["RevealSequencer"], notify: bool = True) -> None:
        with self._lock:
            self._reveal = sequencer
        if notify:
            self.notify()

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Add a session change listener."""
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        """Remove a session change listener."""
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def notify(self) -> None:
        """Notify all listeners of a change."""
        with self._lock:
            listeners = self._listeners.copy()
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("Session listener failed")

    def to_dict(self) -> dict:
        """Get full session state as dictionary."""
        with self._lock:
            return {
                "open": self._matrix is not None,
                "path": self._path,
                "scoreboard": self._matrix.to_dict() if self._matrix is not None else None,
                "reveal": self._reveal.to_dict() if self._reveal is not None else None,
            }

    def to_json(self) -> str:
        """Get full session state as JSON."""
        return json.dumps(self.to_dict())
