"""
Request records for inbound Socket.IO events.

Every handler parses its raw payload through one of these before touching any
state. A field counts as missing when the key is absent or its value is null;
``MalformedPayload`` is raised and the event is dropped by the dispatcher.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .errors import MalformedPayload


def _require(event: str, payload: Any, field: str) -> Any:
    if not isinstance(payload, dict):
        raise MalformedPayload(event, field)
    value = payload.get(field)
    if value is None:
        raise MalformedPayload(event, field)
    return value


def _stream_id(event: str, value: Any, field: str = "streamId") -> str:
    # Stream ids are opaque, but they key dicts and name rooms
    if value is None or isinstance(value, (dict, list, bool)):
        raise MalformedPayload(event, field)
    return str(value)


@dataclass(frozen=True)
class StreamRef:
    """Bare stream id payload (join-stream / leave-stream)"""
    stream_id: str

    @classmethod
    def parse(cls, event: str, payload: Any) -> "StreamRef":
        return cls(_stream_id(event, payload))


@dataclass(frozen=True)
class StreamStarted:
    stream_id: str
    streamer_id: str

    @classmethod
    def parse(cls, event: str, payload: Any) -> "StreamStarted":
        return cls(
            stream_id=_stream_id(event, _require(event, payload, "streamId")),
            streamer_id=str(_require(event, payload, "streamerId")),
        )


@dataclass(frozen=True)
class StreamEnded:
    stream_id: str

    @classmethod
    def parse(cls, event: str, payload: Any) -> "StreamEnded":
        return cls(_stream_id(event, _require(event, payload, "streamId")))


@dataclass(frozen=True)
class SignalMessage:
    """offer / answer / ice-candidate: addressed to one viewer of a stream.

    ``body_field`` names the negotiation blob carried by the event
    (``offer``, ``answer`` or ``candidate``).
    """
    stream_id: str
    viewer_id: Any
    body_field: str
    body: Any
    is_streamer: Optional[bool] = None

    @classmethod
    def parse(cls, event: str, payload: Any, body_field: str) -> "SignalMessage":
        stream_id = _stream_id(event, _require(event, payload, "streamId"))
        viewer_id = _require(event, payload, "viewerId")
        body = _require(event, payload, body_field)
        return cls(
            stream_id=stream_id,
            viewer_id=viewer_id,
            body_field=body_field,
            body=body,
            is_streamer=payload.get("isStreamer"),
        )

    def to_wire(self) -> dict:
        data = {"viewerId": self.viewer_id, self.body_field: self.body}
        if self.body_field == "candidate" and self.is_streamer is not None:
            data["isStreamer"] = self.is_streamer
        return data


@dataclass(frozen=True)
class StreamRequest:
    stream_id: str
    viewer_id: Any

    @classmethod
    def parse(cls, event: str, payload: Any) -> "StreamRequest":
        return cls(
            stream_id=_stream_id(event, _require(event, payload, "streamId")),
            viewer_id=_require(event, payload, "viewerId"),
        )


@dataclass(frozen=True)
class ChatMessage:
    stream_id: str
    message: Any

    @classmethod
    def parse(cls, event: str, payload: Any) -> "ChatMessage":
        return cls(
            stream_id=_stream_id(event, _require(event, payload, "streamId")),
            message=_require(event, payload, "message"),
        )

    @property
    def username(self) -> Optional[str]:
        if isinstance(self.message, dict):
            return self.message.get("username")
        return None
