"""
Socket.IO event dispatch for the signaling relay.

Socket.IO runs every inbound event as its own task, so all handlers go through
one ``asyncio.Lock``: a handler (broadcast sends included) finishes before the
next one starts, and the two presence stores are only ever seen in a
consistent state. Waiters on an ``asyncio.Lock`` are woken in FIFO order,
which keeps events in arrival order.
"""
import asyncio
import logging
from typing import Any, Optional, Set

from .errors import MalformedPayload
from .reconciler import DisconnectReconciler
from .router import SignalingRouter
from .schemas import StreamEnded, StreamRef, StreamStarted
from .state import MembershipTracker, SessionRegistry

logger = logging.getLogger("signal_relay")


class Dispatcher:
    def __init__(
        self,
        transport,
        membership: Optional[MembershipTracker] = None,
        sessions: Optional[SessionRegistry] = None,
    ):
        self.transport = transport
        self.membership = membership if membership is not None else MembershipTracker()
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.router = SignalingRouter(transport)
        self.reconciler = DisconnectReconciler(self.membership, self.sessions, transport)

        # Connected -> Disconnected; a disconnected id never comes back
        self.connections: Set[str] = set()
        self._lock = asyncio.Lock()

        self.handlers = {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            "join-stream": self.join_stream,
            "leave-stream": self.leave_stream,
            "stream-started": self.stream_started,
            "stream-ended": self.stream_ended,
            "get-active-streams": self.get_active_streams,
            "offer": self.router.offer,
            "answer": self.router.answer,
            "ice-candidate": self.router.ice_candidate,
            "request-stream": self.router.request_stream,
            "chat-message": self.router.chat_message,
        }

    def register(self, sio):
        """Bind every handler to the Socket.IO server"""
        for event in self.handlers:
            sio.on(event, handler=self._bind(event))

    def _bind(self, event: str):
        async def handler(sid, *args):
            return await self.dispatch(event, sid, args[0] if args else None)
        return handler

    async def dispatch(self, event: str, conn_id: str, payload: Any = None) -> Any:
        handler = self.handlers.get(event)
        if handler is None:
            logger.debug("Ignoring unknown event %s from %s", event, conn_id)
            return None

        async with self._lock:
            if event != "connect" and conn_id not in self.connections:
                logger.debug("Dropping %s from closed connection %s", event, conn_id)
                return None
            try:
                return await handler(conn_id, payload)
            except MalformedPayload as e:
                logger.debug("🚫 Dropped malformed %s from %s (%s)", event, conn_id, e)
            except Exception:
                logger.exception("Handler for %s failed (connection %s)", event, conn_id)
        return None

    # ============================================================
    # CONNECTION LIFECYCLE
    # ============================================================

    async def on_connect(self, conn_id: str, environ=None):
        self.connections.add(conn_id)
        logger.info("🔌 Client connected: %s", conn_id)

    async def on_disconnect(self, conn_id: str, reason=None):
        self.connections.discard(conn_id)
        logger.info("🔌 Client disconnected: %s", conn_id)
        await self.reconciler.reconcile(conn_id)

    # ============================================================
    # VIEWER MEMBERSHIP
    # ============================================================

    async def join_stream(self, conn_id: str, payload):
        ref = StreamRef.parse("join-stream", payload)
        logger.info("📺 Socket %s joining stream: %s", conn_id, ref.stream_id)

        await self.transport.join_group(conn_id, ref.stream_id)
        count = self.membership.join(ref.stream_id, conn_id)
        await self._broadcast_count(ref.stream_id, count)

    async def leave_stream(self, conn_id: str, payload):
        ref = StreamRef.parse("leave-stream", payload)
        logger.info("👋 Socket %s leaving stream: %s", conn_id, ref.stream_id)

        await self.transport.leave_group(conn_id, ref.stream_id)
        count = self.membership.leave(ref.stream_id, conn_id)
        if count is None:
            return
        await self._broadcast_count(ref.stream_id, count)

    async def _broadcast_count(self, stream_id: str, count: int):
        await self.transport.emit_to_group(
            "viewer-count", stream_id, {"streamId": stream_id, "count": count}
        )

    # ============================================================
    # STREAM SESSIONS
    # ============================================================

    async def stream_started(self, conn_id: str, payload):
        req = StreamStarted.parse("stream-started", payload)
        logger.info("🎬 Stream %s started by %s", req.stream_id, req.streamer_id)

        self.sessions.start(req.stream_id, req.streamer_id)
        await self.transport.join_group(conn_id, req.stream_id)
        await self.transport.emit_all("stream-list-updated")

    async def stream_ended(self, conn_id: str, payload):
        req = StreamEnded.parse("stream-ended", payload)
        if not self.sessions.end(req.stream_id):
            logger.debug("stream-ended without a session for %s from %s", req.stream_id, conn_id)
        logger.info("🛑 Stream %s ended", req.stream_id)

        await self.transport.emit_to_group("stream-ended", req.stream_id)
        await self.transport.emit_all("stream-list-updated")
        self.membership.clear(req.stream_id)

    async def get_active_streams(self, conn_id: str, payload=None):
        # Returned value goes back as the Socket.IO acknowledgement
        return self.sessions.snapshot()
