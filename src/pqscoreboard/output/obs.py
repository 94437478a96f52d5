"""
OBS WebSocket Client

Places the presentation page in an OBS scene as a browser source, so the
reveal can be shown on whatever display or stream OBS outputs to.
Requires OBS 28+ with WebSocket server enabled.
"""

import logging
from typing import Optional

import obsws_python as obs

from ..config import get_config
from .browser import BrowserSurface

logger = logging.getLogger(__name__)


class OBSClient:
    """Client for controlling OBS Studio via WebSocket."""

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 password: Optional[str] = None, source_name: Optional[str] = None):
        """
        Initialize OBS WebSocket client.

        Args:
            host: OBS WebSocket host (default from config)
            port: OBS WebSocket port (default from config)
            password: WebSocket password (default from config)
            source_name: Name of the reveal browser source (default from config)
        """
        config = get_config()
        self.host = host or config.obs.host
        self.port = port or config.obs.port
        self.password = password if password is not None else config.obs.password
        self.source_name = source_name or config.obs.source_name
        self._client: Optional[obs.ReqClient] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        """Check if connected to OBS."""
        return self._connected

    def connect(self) -> bool:
        """
        Connect to OBS WebSocket server.

        Returns:
            True if connected successfully
        """
        try:
            self._client = obs.ReqClient(
                host=self.host,
                port=self.port,
                password=self.password,
                timeout=5
            )
            self._connected = True
            logger.info(f"Connected to OBS at {self.host}:{self.port}")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to OBS: {e}")
            self._connected = False
            return False

    def disconnect(self) -> None:
        """Disconnect from OBS WebSocket server."""
        self._client = None
        self._connected = False
        logger.info("Disconnected from OBS")

    def get_scene_list(self) -> list:
        """Get list of scenes in OBS."""
        if not self._connected or not self._client:
            return []
        try:
            resp = self._client.get_scene_list()
            return [s["sceneName"] for s in resp.scenes]
        except Exception as e:
            logger.error(f"Failed to get scene list: {e}")
            return []

    def get_current_scene(self) -> Optional[str]:
        """Get the current active scene name."""
        if not self._connected or not self._client:
            return None
        try:
            resp = self._client.get_current_program_scene()
            return resp.current_program_scene_name
        except Exception as e:
            logger.error(f"Failed to get current scene: {e}")
            return None

    def _find_item_id(self, scene_name: str) -> Optional[int]:
        resp = self._client.get_scene_item_list(scene_name)
        for item in resp.scene_items:
            if item["sourceName"] == self.source_name:
                return item["sceneItemId"]
        return None

    def setup_presentation(self, url: str, scene_name: Optional[str] = None,
                           width: int = 1920, height: int = 1080) -> bool:
        """
        Create (or repoint) the browser source showing the presentation page.

        Args:
            url: URL of the presentation page
            scene_name: Scene to add the source to (default: current scene)
            width: Browser width
            height: Browser height

        Returns:
            True if set up successfully
        """
        if not self._connected or not self._client:
            return False

        try:
            if scene_name is None:
                scene_name = self.get_current_scene()
            if not scene_name:
                logger.error("No scene available")
                return False

            settings = {"url": url, "width": width, "height": height}

            if self._find_item_id(scene_name) is not None:
                self._client.set_input_settings(self.source_name, settings, True)
                logger.info(f"Updated browser source '{self.source_name}'")
                return True

            settings.update({
                "css": "body { background-color: rgba(0, 0, 0, 0); margin: 0px auto; overflow: hidden; }",
                "shutdown": False,
                "restart_when_active": False,
            })
            self._client.create_input(scene_name, self.source_name, "browser_source", settings, True)
            logger.info(f"Created browser source '{self.source_name}' in scene '{scene_name}'")
            return True

        except Exception as e:
            logger.error(f"Failed to set up presentation source: {e}")
            return False

    def set_presentation_visible(self, visible: bool, scene_name: Optional[str] = None) -> bool:
        """Show or hide the presentation source."""
        if not self._connected or not self._client:
            return False

        try:
            if scene_name is None:
                scene_name = self.get_current_scene()
            if not scene_name:
                return False

            item_id = self._find_item_id(scene_name)
            if item_id is None:
                logger.warning(f"Source '{self.source_name}' not found in scene")
                return False

            self._client.set_scene_item_enabled(scene_name, item_id, visible)
            return True

        except Exception as e:
            logger.error(f"Failed to set source visibility: {e}")
            return False


class OBSSurface(BrowserSurface):
    """
    Presentation page shown through the OBS browser source.

    Steps go to the page like any browser surface; the source is put on
    air when the reveal clears the surface, i.e. once playback has begun.
    """

    name = "obs"

    def __init__(self, client: OBSClient, socketio, namespace: str = "/"):
        super().__init__(socketio, namespace)
        self.client = client

    def clear(self) -> None:
        if not self.client.set_presentation_visible(True):
            logger.warning(f"Could not show OBS source '{self.client.source_name}'")
        super().clear()
