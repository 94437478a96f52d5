"""
PQScoreboard - Scoreboard Editor and Presenter

Main entry point: serves the editor at / and the presentation page at
/present, optionally with CasparCG and OBS outputs.
"""

import argparse
import logging

from .config import load_config, set_config
from .core.errors import InvalidStateError
from .core.session import ScoreboardSession
from .output.caspar import CasparClient, MockCasparClient
from .output.obs import OBSClient
from .reveal.sequencer import RevealState
from .web.app import create_app, make_controller, socketio, set_caspar_client, set_obs_client


def setup_logging(debug: bool = False):
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PQScoreboard - Scoreboard Editor and Presenter"
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to config file",
        default=None
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Web server port (default: 8080)",
        default=None
    )
    parser.add_argument(
        "--open", "-o",
        dest="open_path",
        help="Scoreboard file (.csv or .json) to open at startup",
        default=None
    )
    parser.add_argument(
        "--no-caspar",
        action="store_true",
        help="Disable CasparCG output"
    )
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    config = load_config(args.config)

    # Apply command line overrides
    if args.debug:
        config.debug = True
    if args.port:
        config.web.port = args.port
    if args.no_caspar:
        config.caspar.enabled = False

    set_config(config)

    # Setup logging
    setup_logging(config.debug)
    logger = logging.getLogger("pqscoreboard")

    logger.info("=" * 50)
    logger.info("PQScoreboard - Scoreboard Editor and Presenter")
    logger.info("=" * 50)

    session = ScoreboardSession()
    controller = make_controller(session)

    if args.open_path:
        result = controller.open_file(args.open_path)
        if not result.ok:
            logger.error(result.message)

    # Setup CasparCG output
    caspar_client = None
    if config.caspar.enabled:
        caspar_client = CasparClient()
        if caspar_client.connect():
            logger.info("Connected to CasparCG")
        else:
            logger.warning("Could not connect to CasparCG")
    elif config.debug:
        caspar_client = MockCasparClient()
        logger.info("CasparCG disabled, using mock client")
    set_caspar_client(caspar_client)

    # Setup OBS output
    obs_client = None
    if config.obs.enabled:
        obs_client = OBSClient()
        if not obs_client.connect():
            logger.warning("Could not connect to OBS")
    set_obs_client(obs_client)

    app = create_app(controller)

    logger.info(f"Editor on http://{config.web.host}:{config.web.port}/")
    logger.info(f"Presentation page on http://{config.web.host}:{config.web.port}/present")
    logger.info("Press Ctrl+C to stop")

    try:
        socketio.run(
            app,
            host=config.web.host,
            port=config.web.port,
            debug=False,
            use_reloader=False,
            allow_unsafe_werkzeug=True
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        reveal = session.reveal
        if reveal is not None and reveal.state is RevealState.RUNNING:
            try:
                reveal.cancel()
            except InvalidStateError:
                logger.debug("Reveal finished during shutdown")
        if caspar_client:
            caspar_client.disconnect()
        if obs_client:
            obs_client.disconnect()

    logger.info("PQScoreboard stopped")
