"""
In-memory presence state for the relay
Viewer membership per stream + active stream sessions
"""
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from .utils import now_ms

logger = logging.getLogger("signal_relay")


@dataclass(frozen=True)
class StreamSession:
    stream_id: str
    streamer_id: str
    started_at: int

    def to_wire(self) -> dict:
        return {
            "id": self.stream_id,
            "streamerId": self.streamer_id,
            "startedAt": self.started_at,
        }


class MembershipTracker:
    """Tracks which connections are watching each stream.

    A stream's viewer set is created on first join and dropped as soon as it
    becomes empty. The reverse index lets a disconnect touch only the streams
    that connection was actually watching.
    """

    def __init__(self):
        self._viewers: Dict[str, Set[str]] = {}
        self._streams_by_conn: Dict[str, Set[str]] = {}

    def join(self, stream_id: str, conn_id: str) -> int:
        viewers = self._viewers.setdefault(stream_id, set())
        viewers.add(conn_id)
        self._streams_by_conn.setdefault(conn_id, set()).add(stream_id)
        return len(viewers)

    def leave(self, stream_id: str, conn_id: str) -> Optional[int]:
        """Remove a viewer; returns the new count, or None if it wasn't watching"""
        viewers = self._viewers.get(stream_id)
        if not viewers or conn_id not in viewers:
            return None

        viewers.discard(conn_id)
        self._unindex(conn_id, stream_id)
        if not viewers:
            del self._viewers[stream_id]
            return 0
        return len(viewers)

    def remove_connection_everywhere(self, conn_id: str) -> List[Tuple[str, int]]:
        """Drop a connection from every viewer set; returns (stream_id, new_count) pairs"""
        updates = []
        for stream_id in self._streams_by_conn.pop(conn_id, set()):
            viewers = self._viewers.get(stream_id)
            if viewers is None:
                continue
            viewers.discard(conn_id)
            if not viewers:
                del self._viewers[stream_id]
            updates.append((stream_id, len(viewers)))
        return updates

    def clear(self, stream_id: str) -> int:
        viewers = self._viewers.pop(stream_id, set())
        for conn_id in viewers:
            self._unindex(conn_id, stream_id)
        return len(viewers)

    def count(self, stream_id: str) -> int:
        return len(self._viewers.get(stream_id, ()))

    def viewers(self, stream_id: str) -> FrozenSet[str]:
        return frozenset(self._viewers.get(stream_id, ()))

    def streams_for(self, conn_id: str) -> FrozenSet[str]:
        return frozenset(self._streams_by_conn.get(conn_id, ()))

    def __contains__(self, stream_id: str) -> bool:
        return stream_id in self._viewers

    def __len__(self) -> int:
        return len(self._viewers)

    def _unindex(self, conn_id: str, stream_id: str):
        streams = self._streams_by_conn.get(conn_id)
        if streams is None:
            return
        streams.discard(stream_id)
        if not streams:
            del self._streams_by_conn[conn_id]


class SessionRegistry:
    """Active stream sessions keyed by stream id"""

    def __init__(self):
        self._sessions: Dict[str, StreamSession] = {}

    def start(self, stream_id: str, streamer_id: str) -> StreamSession:
        previous = self._sessions.get(stream_id)
        if previous is not None:
            # No stream-ended goes out for the replaced session
            logger.warning(
                "⚠️ Stream %s restarted by %s, replacing session of %s",
                stream_id, streamer_id, previous.streamer_id
            )

        session = StreamSession(stream_id, streamer_id, now_ms())
        self._sessions[stream_id] = session
        return session

    def end(self, stream_id: str) -> bool:
        return self._sessions.pop(stream_id, None) is not None

    def get(self, stream_id: str) -> Optional[StreamSession]:
        return self._sessions.get(stream_id)

    def find_by_streamer(self, conn_id: str) -> List[str]:
        return [
            stream_id for stream_id, session in self._sessions.items()
            if session.streamer_id == conn_id
        ]

    def snapshot(self) -> List[dict]:
        return [session.to_wire() for session in list(self._sessions.values())]

    def __contains__(self, stream_id: str) -> bool:
        return stream_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
