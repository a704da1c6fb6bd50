"""Application entry point for the HotSeat host server."""

from __future__ import annotations

import logging
import os
import socket

from hotseat.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from hotseat.core.event_config import load_event_config
from hotseat.core.game_manager import GameManager
from hotseat.core.services.state_store import InMemoryStateStore
from hotseat.server.api_server import start_api_server, start_phone_timer_ticker
from hotseat.utils.logging_config import configure_logging


def _determine_console_url(port: int) -> str:
    """Best-effort determination of the local IP for the host console URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Initialize logging, build the game manager and serve it until interrupted."""
    logger = configure_logging(logging.DEBUG if os.environ.get("HOTSEAT_DEBUG") else logging.INFO)
    logger.info("Starting HotSeat server...")

    config = load_event_config()
    host = os.environ.get("HOTSEAT_HOST", DEFAULT_HOST)
    port = int(os.environ.get("HOTSEAT_PORT", DEFAULT_PORT))

    game_manager = GameManager(config=config, store=InMemoryStateStore())
    _, stop_ticker = start_phone_timer_ticker(game_manager)
    server_thread = start_api_server(game_manager=game_manager, host=host, port=port)
    logger.info("Host console available at %s", _determine_console_url(port))

    try:
        server_thread.join()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        stop_ticker.set()


if __name__ == "__main__":
    main()
