"""
WebRTC signaling and chat routing

Routing is room-scoped: the transport can't address a single connection, so
negotiation messages go to every other member of the stream's group tagged with
the target viewerId and the clients discard what isn't theirs.
"""
import logging

from .schemas import ChatMessage, SignalMessage, StreamRequest

logger = logging.getLogger("signal_relay")


class SignalingRouter:
    def __init__(self, transport):
        self.transport = transport

    async def offer(self, conn_id: str, payload) -> None:
        msg = SignalMessage.parse("offer", payload, "offer")
        logger.debug("📤 Offer from streamer to viewer %s in stream %s", msg.viewer_id, msg.stream_id)
        await self._relay("offer", conn_id, msg)

    async def answer(self, conn_id: str, payload) -> None:
        msg = SignalMessage.parse("answer", payload, "answer")
        logger.debug("📥 Answer from viewer %s in stream %s", msg.viewer_id, msg.stream_id)
        await self._relay("answer", conn_id, msg)

    async def ice_candidate(self, conn_id: str, payload) -> None:
        msg = SignalMessage.parse("ice-candidate", payload, "candidate")
        logger.debug(
            "🧊 ICE candidate from %s %s in stream %s",
            "streamer" if msg.is_streamer else "viewer", msg.viewer_id, msg.stream_id
        )
        await self._relay("ice-candidate", conn_id, msg)

    async def request_stream(self, conn_id: str, payload) -> None:
        req = StreamRequest.parse("request-stream", payload)
        logger.debug("🎥 Viewer %s requesting stream %s", req.viewer_id, req.stream_id)
        await self.transport.emit_to_group(
            "viewer-joined", req.stream_id, {"viewerId": req.viewer_id}, skip=conn_id
        )

    async def chat_message(self, conn_id: str, payload) -> None:
        chat = ChatMessage.parse("chat-message", payload)
        logger.debug(f"💬 Chat message in stream {chat.stream_id}: {chat.username}")
        # Chat echoes back to the sender too
        await self.transport.emit_to_group("chat-message", chat.stream_id, chat.message)

    async def _relay(self, event: str, conn_id: str, msg: SignalMessage) -> None:
        await self.transport.emit_to_group(event, msg.stream_id, msg.to_wire(), skip=conn_id)
