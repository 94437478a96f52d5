"""
Reveal Sequencer

Plays a scoreboard's reveal steps onto a presentation surface, one step
per tick, with a fixed delay between steps.

States: IDLE -> RUNNING -> COMPLETED | CANCELLED. A sequencer runs once;
start a new reveal with a new sequencer.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, TYPE_CHECKING

from ..core.errors import InvalidStateError, NotPresentableError
from ..core.matrix import ScoreMatrix
from .steps import RevealStep, build_steps

if TYPE_CHECKING:
    from ..output.base import PresentationSurface

logger = logging.getLogger(__name__)

DEFAULT_STEP_DELAY = 2.0  # seconds


class RevealState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Action(str, Enum):
    RENDER = "render"
    WAIT = "wait"
    COMPLETE = "complete"
    STOP = "stop"


def next_action(state: RevealState, index: int, step_count: int, delay_elapsed: bool) -> Action:
    """
    Decide what the playback loop does next.

    Args:
        state: Current sequencer state
        index: Index of the next step to render
        step_count: Total number of steps
        delay_elapsed: Whether the inter-step delay has passed since the
            last render

    Returns:
        STOP if the run is no longer RUNNING, COMPLETE after the last step,
        WAIT between steps, RENDER otherwise
    """
    if state is not RevealState.RUNNING:
        return Action.STOP
    if index >= step_count:
        return Action.COMPLETE
    if index > 0 and not delay_elapsed:
        return Action.WAIT
    return Action.RENDER


@dataclass
class RevealOptions:
    """Options for one reveal run."""
    inter_step_delay: float = DEFAULT_STEP_DELAY
    show_running_totals: bool = False
    target_surface: Optional["PresentationSurface"] = None

    def __post_init__(self):
        if not math.isfinite(self.inter_step_delay) or self.inter_step_delay < 0:
            raise ValueError("inter_step_delay must be a finite, non-negative number")


def _spawn_thread(target: Callable[[], None]) -> None:
    threading.Thread(target=target, name="reveal", daemon=True).start()


class RevealSequencer:
    """
    Paced, cancellable reveal of a scoreboard.

    Playback is handed to ``spawn`` (default: a daemon thread) and paused
    between steps with ``sleep``. The web application passes Socket.IO's
    background task and sleep functions; tests pass inline versions.
    """

    def __init__(
        self,
        spawn: Optional[Callable[[Callable[[], None]], object]] = None,
        sleep: Optional[Callable[[float], object]] = None,
        on_change: Optional[Callable[["RevealSequencer"], None]] = None,
    ):
        self._spawn = spawn or _spawn_thread
        self._sleep = sleep or time.sleep
        self._on_change = on_change
        self._lock = threading.RLock()
        self._done = threading.Event()
        self._state = RevealState.IDLE
        self._steps: Tuple[RevealStep, ...] = ()
        self._options: Optional[RevealOptions] = None
        self._rendered = 0
        self._error: Optional[str] = None

    @property
    def state(self) -> RevealState:
        with self._lock:
            return self._state

    @property
    def steps(self) -> Tuple[RevealStep, ...]:
        """Steps of the current run (empty before start)."""
        return self._steps

    @property
    def rendered_count(self) -> int:
        """Number of steps pushed to the surface so far."""
        with self._lock:
            return self._rendered

    @property
    def error(self) -> Optional[str]:
        return self._error

    def start(self, matrix: ScoreMatrix, options: Optional[RevealOptions] = None) -> None:
        """
        Begin revealing a scoreboard.

        Validation happens before anything is scheduled; on failure the
        sequencer stays IDLE and the surface is not touched.

        Raises:
            InvalidStateError: if the sequencer is not IDLE
            NotPresentableError: if the scoreboard has no teams or
                categories, or no target surface was given
        """
        options = options or RevealOptions()
        with self._lock:
            if self._state is not RevealState.IDLE:
                raise InvalidStateError(f"Cannot start a reveal that is {self._state.value}")
            if options.target_surface is None:
                raise NotPresentableError("No presentation surface selected")

            self._steps = build_steps(matrix, options.show_running_totals)
            self._options = options
            self._state = RevealState.RUNNING

        logger.info(f"Reveal started: {len(self._steps)} steps, "
                    f"{options.inter_step_delay}s apart")
        self._changed()

        try:
            self._spawn(self._play)
        except Exception as e:
            self._finish(RevealState.CANCELLED, error=str(e))
            raise

    def cancel(self) -> None:
        """
        Stop the reveal. No step starts after this returns; a render
        already in progress completes first.

        Raises:
            InvalidStateError: if the sequencer is not RUNNING
        """
        with self._lock:
            if self._state is not RevealState.RUNNING:
                raise InvalidStateError(f"Cannot cancel a reveal that is {self._state.value}")
            self._state = RevealState.CANCELLED
            self._done.set()
        logger.info(f"Reveal cancelled after {self._rendered} of {len(self._steps)} steps")
        self._changed()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run is COMPLETED or CANCELLED."""
        return self._done.wait(timeout)

    def _finish(self, state: RevealState, error: Optional[str] = None) -> None:
        with self._lock:
            if self._state is not RevealState.RUNNING:
                return
            self._state = state
            self._error = error
            self._done.set()
        logger.info(f"Reveal {state.value}")
        self._changed()

    def _changed(self) -> None:
        if self._on_change:
            try:
                self._on_change(self)
            except Exception:
                logger.exception("Reveal change callback failed")

    def _play(self) -> None:
        """Playback loop."""
        surface = self._options.target_surface
        delay = self._options.inter_step_delay
        index = 0
        delay_elapsed = False

        try:
            with self._lock:
                if self._state is RevealState.RUNNING:
                    surface.clear()

            while True:
                with self._lock:
                    action = next_action(self._state, index, len(self._steps), delay_elapsed)

                    if action is Action.RENDER:
                        step = self._steps[index]
                        logger.debug(f"Reveal step {index}: {step.kind.value}")
                        surface.render(step)
                        self._rendered = index + 1
                        index += 1
                        delay_elapsed = False
                        continue

                if action is Action.WAIT:
                    self._sleep(delay)
                    delay_elapsed = True
                elif action is Action.COMPLETE:
                    self._finish(RevealState.COMPLETED)
                    return
                else:
                    return
        except Exception as e:
            logger.exception("Reveal playback failed")
            self._finish(RevealState.CANCELLED, error=str(e))

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "step_count": len(self._steps),
                "rendered": self._rendered,
                "show_running_totals": self._options.show_running_totals if self._options else False,
                "inter_step_delay": self._options.inter_step_delay if self._options else None,
                "error": self._error,
            }
