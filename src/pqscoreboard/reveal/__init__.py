"""PQScoreboard Reveal Engine"""

from .steps import RevealStep, StepKind, build_steps
from .sequencer import (
    Action,
    RevealOptions,
    RevealSequencer,
    RevealState,
    next_action,
    DEFAULT_STEP_DELAY,
)

__all__ = [
    "RevealStep", "StepKind", "build_steps", "Action", "RevealOptions",
    "RevealSequencer", "RevealState", "next_action", "DEFAULT_STEP_DELAY",
]
