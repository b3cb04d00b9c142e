"""
Socket.IO transport adapter.

The relay core only needs group membership and group / global broadcast; this
wraps ``socketio.AsyncServer`` so handlers never deal with room names or
namespaces directly.
"""
import logging
from typing import Any, List, Optional

import socketio

from .utils import group_name

logger = logging.getLogger("signal_relay")


def create_socket_server(allowed_origins: List[str]) -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="aiohttp",
        cors_allowed_origins=allowed_origins,
        cors_credentials=True,
        ping_timeout=60,
        ping_interval=25,
    )


class SocketIOTransport:
    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    async def join_group(self, conn_id: str, stream_id: str):
        await self.sio.enter_room(conn_id, group_name(stream_id))

    async def leave_group(self, conn_id: str, stream_id: str):
        await self.sio.leave_room(conn_id, group_name(stream_id))

    async def emit_to_group(
        self,
        event: str,
        stream_id: str,
        data: Any = None,
        skip: Optional[str] = None,
    ):
        """Broadcast to a stream's group, optionally excluding one connection"""
        await self.sio.emit(event, data, room=group_name(stream_id), skip_sid=skip)

    async def emit_all(self, event: str, data: Any = None):
        await self.sio.emit(event, data)
