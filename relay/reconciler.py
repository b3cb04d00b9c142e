"""
Disconnect cleanup across both presence stores
"""
import logging

from .state import MembershipTracker, SessionRegistry

logger = logging.getLogger("signal_relay")


class DisconnectReconciler:
    """Removes a vanished connection from viewer sets and ends the streams it owned.

    The viewer pass and the streamer pass are independent: a connection can
    watch other streams while broadcasting its own, and both effects apply.
    """

    def __init__(self, membership: MembershipTracker, sessions: SessionRegistry, transport):
        self.membership = membership
        self.sessions = sessions
        self.transport = transport

    async def reconcile(self, conn_id: str) -> None:
        for stream_id, count in self.membership.remove_connection_everywhere(conn_id):
            await self.transport.emit_to_group(
                "viewer-count", stream_id, {"streamId": stream_id, "count": count}
            )

        for stream_id in self.sessions.find_by_streamer(conn_id):
            logger.info("🛑 Streamer disconnected, ending stream %s", stream_id)
            self.sessions.end(stream_id)
            await self.transport.emit_to_group("stream-ended", stream_id)
            await self.transport.emit_all("stream-list-updated")
            # Remaining viewers go with the session
            self.membership.clear(stream_id)
