"""
CasparCG AMCP Surface

Shows reveal steps through an HTML template on a CasparCG server, using
the AMCP protocol over TCP.
"""

import socket
import logging
import json
from typing import Optional

from ..config import get_config
from ..reveal.steps import RevealStep
from .base import PresentationSurface

logger = logging.getLogger(__name__)


class CasparClient(PresentationSurface):
    """
    CasparCG AMCP protocol client.

    clear() (re)loads the reveal template on the configured channel and
    layer; render() pushes one step into it with CG UPDATE.
    """

    name = "caspar"

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 channel: Optional[int] = None, layer: Optional[int] = None,
                 template: Optional[str] = None):
        """
        Initialize CasparCG client.

        Args:
            host: CasparCG server hostname (default from config)
            port: CasparCG server port (default from config)
            channel: Video channel number (default from config)
            layer: Graphics layer number (default from config)
            template: HTML template path (default from config)
        """
        config = get_config()
        self.host = host or config.caspar.host
        self.port = port or config.caspar.port
        self.channel = channel or config.caspar.channel
        self.layer = layer or config.caspar.layer
        self.template = template or config.caspar.template
        self._socket: Optional[socket.socket] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        """Check if connected to CasparCG."""
        return self._connected

    def connect(self) -> bool:
        """
        Connect to CasparCG server.

        Returns:
            True if connection successful, False otherwise
        """
        if self._connected:
            return True

        try:
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._socket.settimeout(5.0)
            self._socket.connect((self.host, self.port))
            self._connected = True
            logger.info(f"Connected to CasparCG at {self.host}:{self.port}")
            return True
        except OSError as e:
            logger.warning(f"Failed to connect to CasparCG: {e}")
            self._connected = False
            self._socket = None
            return False

    def disconnect(self) -> None:
        """Disconnect from CasparCG server."""
        if self._socket:
            try:
                self._socket.close()
            except OSError as e:
                logger.debug(f"Error closing CasparCG socket: {e}")
        self._socket = None
        self._connected = False
        logger.info("Disconnected from CasparCG")

    def send(self, command: str) -> bool:
        """
        Send raw AMCP command to CasparCG.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self._connected:
            if not self.connect():
                return False

        try:
            self._socket.sendall(f"{command}\r\n".encode("utf-8"))
            logger.debug(f"Sent: {command}")
            return True
        except OSError as e:
            logger.warning(f"Failed to send command: {e}")
            self._connected = False
            return False

    def _target(self) -> str:
        return f"{self.channel}-{self.layer}"

    def _command(self, command: str) -> None:
        if not self.send(command):
            raise ConnectionError(f"CasparCG command failed on {self.host}:{self.port}")

    def render(self, step: RevealStep) -> None:
        """Push one reveal step into the template."""
        payload = json.dumps(step.to_dict()).replace('"', '\\"')
        self._command(f'CG {self._target()} UPDATE 1 "{payload}"')

    def clear(self) -> None:
        """Load a fresh copy of the reveal template."""
        self._command(f'CG {self._target()} ADD 1 "{self.template}" 1')

    def stop(self) -> bool:
        """Take the reveal template off air."""
        return self.send(f'CG {self._target()} STOP 1')


# Mock client for testing without CasparCG
class MockCasparClient(CasparClient):
    """
    Mock CasparCG client for testing.

    Logs all commands instead of sending to server.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._commands: list = []

    def connect(self) -> bool:
        self._connected = True
        logger.info("MockCasparClient: Simulated connection")
        return True

    def disconnect(self) -> None:
        self._connected = False
        logger.info("MockCasparClient: Simulated disconnect")

    def send(self, command: str) -> bool:
        self._commands.append(command)
        logger.debug(f"MockCasparClient: {command}")
        return True

    def get_commands(self) -> list:
        """Get list of all commands sent."""
        return self._commands.copy()

    def clear_commands(self) -> None:
        """Clear command history."""
        self._commands.clear()
