"""
Browser Presentation Surface

Pushes reveal steps over Socket.IO to the full-screen presentation page
(/present), which is opened on the secondary display or loaded into OBS
as a browser source.
"""

import logging

from flask_socketio import SocketIO

from ..reveal.steps import RevealStep
from .base import PresentationSurface

logger = logging.getLogger(__name__)

STEP_EVENT = "reveal_step"
CLEAR_EVENT = "reveal_clear"


class BrowserSurface(PresentationSurface):
    """Presentation page surface."""

    name = "browser"

    def __init__(self, socketio: SocketIO, namespace: str = "/"):
        self._socketio = socketio
        self._namespace = namespace

    def render(self, step: RevealStep) -> None:
        self._socketio.emit(STEP_EVENT, step.to_dict(), namespace=self._namespace)

    def clear(self) -> None:
        self._socketio.emit(CLEAR_EVENT, {}, namespace=self._namespace)
