#!/usr/bin/env python3
"""
Signal Relay - Entry Point
Socket.IO signaling for one-to-many WebRTC broadcasts + health check
"""
import logging
from typing import List, Optional

from aiohttp import web

from relay import config
from relay.api import health, not_found
from relay.dispatcher import Dispatcher
from relay.transport import SocketIOTransport, create_socket_server

logging.basicConfig(
    level=config.get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("signal_relay")

DISPATCHER_KEY = web.AppKey("dispatcher", Dispatcher)


async def on_shutdown(app):
    logger.info("Shutdown signal received: closing HTTP server")


async def on_cleanup(app):
    logger.info("HTTP server closed")


def create_app(allowed_origins: Optional[List[str]] = None) -> web.Application:
    """Create the aiohttp application with the Socket.IO relay attached"""
    if allowed_origins is None:
        allowed_origins = config.get_allowed_origins()

    app = web.Application()
    sio = create_socket_server(allowed_origins)
    sio.attach(app)

    dispatcher = Dispatcher(SocketIOTransport(sio))
    dispatcher.register(sio)
    app[DISPATCHER_KEY] = dispatcher

    app.router.add_get("/health", health)
    # Anything else that isn't Socket.IO
    app.router.add_route("*", "/{tail:.*}", not_found)

    app.on_shutdown.append(on_shutdown)
    app.on_cleanup.append(on_cleanup)
    return app


def main():
    port = config.get_port()
    host = config.get_host()
    origins = config.get_allowed_origins()
    app = create_app(origins)

    logger.info("🚀 Socket.IO server starting on %s:%s", host, port)
    logger.info("🌐 Client URL: %s", ", ".join(origins))

    web.run_app(app, host=host, port=port)


if __name__ == "__main__":
    main()
