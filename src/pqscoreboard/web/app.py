"""
PQScoreboard Web Application

Flask-based editor API and presentation page, with Socket.IO pushing
session updates and reveal steps to connected browsers.
"""

import io
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, render_template, request, send_file
from flask_socketio import SocketIO, emit

from ..config import get_config
from ..core.session import ScoreboardSession
from ..editor.controller import CommandResult, EditorController
from ..output.base import PresentationSurface
from ..output.browser import BrowserSurface
from ..output.obs import OBSSurface
from ..reveal.sequencer import RevealSequencer
from ..storage import supported_extensions

logger = logging.getLogger(__name__)

socketio = SocketIO(cors_allowed_origins="*")

# Optional output clients (set by main app)
_caspar_client = None
_obs_client = None


def set_caspar_client(client):
    """Set the CasparCG client instance."""
    global _caspar_client
    _caspar_client = client


def set_obs_client(client):
    """Set the OBS client instance."""
    global _obs_client
    _obs_client = client


def available_surfaces() -> list:
    """Presentation targets the operator can choose from."""
    surfaces = [{"name": "browser", "label": "Presentation page (/present)"}]
    if _caspar_client is not None:
        surfaces.append({"name": "caspar", "label": "CasparCG",
                         "connected": _caspar_client.connected})
    if _obs_client is not None:
        surfaces.append({"name": "obs", "label": "OBS browser source",
                         "connected": _obs_client.connected})
    return surfaces


def resolve_surface(name: str) -> Optional[PresentationSurface]:
    """Get the surface for a target name, or None if unavailable."""
    if name == "browser":
        return BrowserSurface(socketio)
    if name == "caspar" and _caspar_client is not None:
        return _caspar_client
    if name == "obs" and _obs_client is not None:
        return OBSSurface(_obs_client, socketio)
    return None


def make_controller(session: ScoreboardSession) -> EditorController:
    """Editor controller whose reveals run as Socket.IO background tasks."""
    return EditorController(
        session,
        sequencer_factory=lambda: RevealSequencer(
            spawn=socketio.start_background_task,
            sleep=socketio.sleep,
            on_change=lambda seq: session.notify(),
        ),
    )


def _respond(result: CommandResult):
    if result.ok:
        return jsonify(result.to_dict())
    code = 409 if result.error_type == "InvalidStateError" else 400
    return jsonify({"error": result.message, "error_type": result.error_type, **result.data}), code


def create_app(controller: Optional[EditorController] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        controller: Editor controller to serve (default: a new session
            whose reveals run as Socket.IO background tasks)

    Returns:
        Configured Flask application
    """
    base_dir = Path(__file__).parent
    app = Flask(__name__, template_folder=str(base_dir / "templates"))

    config = get_config()
    app.config["SECRET_KEY"] = "pqscoreboard-secret-key"
    app.config["DEBUG"] = config.web.debug

    socketio.init_app(app)

    if controller is None:
        controller = make_controller(ScoreboardSession())
    session = controller.session
    app.extensions["pqscoreboard.controller"] = controller

    def state_payload() -> dict:
        payload = session.to_dict()
        payload["grid"] = controller.grid()
        payload["capabilities"] = controller.capabilities()
        return payload

    # Register session change listener
    def on_session_change():
        socketio.emit("state_update", state_payload())

    session.add_listener(on_session_change)

    # ============ Pages ============

    @app.route("/")
    def index():
        """Editor page."""
        return render_template("editor.html", extensions=supported_extensions())

    @app.route("/present")
    def present():
        """Full-screen presentation page (open on the audience display)."""
        return render_template("present.html")

    # ============ Scoreboard API ============

    @app.route("/api/state", methods=["GET"])
    def get_state():
        return jsonify(state_payload())

    @app.route("/api/scoreboard/new", methods=["POST"])
    def new_scoreboard():
        data = request.get_json() or {}
        return _respond(controller.new_scoreboard(data.get("teams", 0), data.get("categories", 0)))

    @app.route("/api/scoreboard/open", methods=["POST"])
    def open_scoreboard():
        """Open an uploaded file, or a path on the server."""
        upload = request.files.get("file")
        if upload is not None:
            return _respond(controller.open_stream(upload.stream, upload.filename or ""))
        data = request.get_json(silent=True) or {}
        if not data.get("path"):
            return jsonify({"error": "No file or path given"}), 400
        return _respond(controller.open_file(data["path"]))

    @app.route("/api/scoreboard/save", methods=["POST"])
    def save_scoreboard():
        data = request.get_json(silent=True) or {}
        return _respond(controller.save_file(data.get("path")))

    @app.route("/api/scoreboard/download", methods=["GET"])
    def download_scoreboard():
        filename = f"scoreboard.{request.args.get('format', 'csv')}"
        if Path(filename).suffix not in supported_extensions():
            return jsonify({"error": f"Unsupported format '{request.args.get('format')}'"}), 400
        buffer = io.BytesIO()
        result = controller.save_stream(buffer, filename)
        if not result.ok:
            return _respond(result)
        buffer.seek(0)
        return send_file(buffer, as_attachment=True, download_name=filename)

    @app.route("/api/scoreboard/close", methods=["POST"])
    def close_scoreboard():
        return _respond(controller.close())

    @app.route("/api/teams", methods=["POST"])
    def add_team():
        data = request.get_json() or {}
        return _respond(controller.add_team(data.get("name", "")))

    @app.route("/api/categories", methods=["POST"])
    def add_category():
        data = request.get_json() or {}
        return _respond(controller.add_category(data.get("name", ""), data.get("scores", [])))

    @app.route("/api/scores/<int:team>/<int:category>", methods=["PUT"])
    def set_score(team, category):
        data = request.get_json() or {}
        return _respond(controller.set_score_text(team, category, str(data.get("value", ""))))

    # ============ Reveal API ============

    @app.route("/api/surfaces", methods=["GET"])
    def list_surfaces():
        return jsonify({"surfaces": available_surfaces(),
                        "default": get_config().reveal.default_surface})

    @app.route("/api/reveal", methods=["GET"])
    def get_reveal():
        reveal = session.reveal
        return jsonify(reveal.to_dict() if reveal is not None else {"state": None})

    @app.route("/api/reveal/start", methods=["POST"])
    def start_reveal():
        data = request.get_json(silent=True) or {}
        name = data.get("surface") or get_config().reveal.default_surface
        surface = resolve_surface(name)
        if surface is None:
            return jsonify({"error": f"Presentation surface '{name}' is not available"}), 400
        return _respond(controller.start_reveal(
            surface,
            inter_step_delay=data.get("inter_step_delay"),
            show_running_totals=data.get("show_running_totals"),
        ))

    @app.route("/api/reveal/cancel", methods=["POST"])
    def cancel_reveal():
        return _respond(controller.cancel_reveal())

    # ============ OBS API ============

    @app.route("/api/obs/setup", methods=["POST"])
    def obs_setup():
        """Point the OBS browser source at the presentation page."""
        if _obs_client is None:
            return jsonify({"error": "OBS is not enabled"}), 400
        if not _obs_client.connected and not _obs_client.connect():
            return jsonify({"error": "Could not connect to OBS"}), 500
        data = request.get_json(silent=True) or {}
        url = data.get("url") or f"{request.host_url.rstrip('/')}/present"
        if _obs_client.setup_presentation(url, data.get("scene")):
            return jsonify({"status": "ok", "url": url})
        return jsonify({"error": "Failed to set up presentation source"}), 500

    @app.route("/api/obs/scenes", methods=["GET"])
    def obs_scenes():
        if _obs_client is None:
            return jsonify({"error": "OBS is not enabled"}), 400
        return jsonify({"scenes": _obs_client.get_scene_list()})

    # ============ WebSocket Events ============

    @socketio.on("connect")
    def handle_connect():
        """Handle client connection."""
        logger.info("WebSocket client connected")
        emit("state_update", state_payload())

    @socketio.on("disconnect")
    def handle_disconnect():
        """Handle client disconnection."""
        logger.info("WebSocket client disconnected")

    @socketio.on("request_state")
    def handle_request_state():
        """Handle state request from client."""
        emit("state_update", state_payload())

    return app
