"""
Presentation Surfaces

A surface receives reveal steps and shows them to the audience. The
sequencer only pushes steps to a surface; it never creates or owns one.
"""

import logging
from typing import List

from ..reveal.steps import RevealStep

logger = logging.getLogger(__name__)


class PresentationSurface:
    """Base class for reveal targets."""

    name: str = "surface"

    def render(self, step: RevealStep) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class RecordingSurface(PresentationSurface):
    """
    Surface that keeps every step in memory.

    Used for previews and testing.
    """

    name = "recording"

    def __init__(self):
        self._steps: List[RevealStep] = []
        self.clear_count = 0

    def render(self, step: RevealStep) -> None:
        self._steps.append(step)
        logger.debug(f"RecordingSurface: step {step.index} ({step.kind.value})")

    def clear(self) -> None:
        self._steps.clear()
        self.clear_count += 1

    def get_steps(self) -> List[RevealStep]:
        """Get list of all steps rendered since the last clear."""
        return self._steps.copy()
