"""
HTTP handlers served next to the Socket.IO endpoint
"""
import logging
from aiohttp import web

from .utils import iso_timestamp

logger = logging.getLogger("signal_relay")


async def health(request: web.Request) -> web.Response:
    """Liveness check"""
    return web.json_response({"status": "ok", "timestamp": iso_timestamp()})


async def not_found(request: web.Request) -> web.Response:
    return web.Response(status=404, text="Socket.IO Server Running")
