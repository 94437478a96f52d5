"""PQScoreboard Presentation Surfaces"""

from .base import PresentationSurface, RecordingSurface
from .browser import BrowserSurface
from .caspar import CasparClient, MockCasparClient
from .obs import OBSClient, OBSSurface

__all__ = [
    "PresentationSurface", "RecordingSurface", "BrowserSurface",
    "CasparClient", "MockCasparClient", "OBSClient", "OBSSurface",
]
