from collections import defaultdict

import pytest

from relay.dispatcher import Dispatcher
from relay.utils import group_name


class FakeTransport:
    """In-memory stand-in for the Socket.IO transport.

    Models rooms the way Socket.IO does and records what each connection
    received, so routing can be asserted per recipient.
    """

    def __init__(self):
        self.connected = set()
        self.groups = defaultdict(set)
        self.inbox = defaultdict(list)
        self.group_emits = []
        self.global_emits = []

    async def join_group(self, conn_id, stream_id):
        self.groups[group_name(stream_id)].add(conn_id)

    async def leave_group(self, conn_id, stream_id):
        self.groups[group_name(stream_id)].discard(conn_id)

    async def emit_to_group(self, event, stream_id, data=None, skip=None):
        self.group_emits.append((event, stream_id, data, skip))
        for conn_id in sorted(self.groups.get(group_name(stream_id), ())):
            if conn_id != skip:
                self.inbox[conn_id].append((event, data))

    async def emit_all(self, event, data=None):
        self.global_emits.append((event, data))
        for conn_id in sorted(self.connected):
            self.inbox[conn_id].append((event, data))

    def drop(self, conn_id):
        self.connected.discard(conn_id)
        for members in self.groups.values():
            members.discard(conn_id)

    def received(self, conn_id, event=None):
        return [
            data for name, data in self.inbox[conn_id]
            if event is None or name == event
        ]

    def counts(self, stream_id):
        return [
            data["count"] for event, sid, data, _ in self.group_emits
            if event == "viewer-count" and sid == stream_id
        ]

    def reset(self):
        self.inbox.clear()
        self.group_emits.clear()
        self.global_emits.clear()


class Relay:
    """Drives a Dispatcher the way the Socket.IO server would"""

    def __init__(self, dispatcher, transport):
        self.dispatcher = dispatcher
        self.transport = transport

    async def connect(self, *conn_ids):
        for conn_id in conn_ids:
            self.transport.connected.add(conn_id)
            await self.dispatcher.dispatch("connect", conn_id, {})

    async def send(self, conn_id, event, payload=None):
        return await self.dispatcher.dispatch(event, conn_id, payload)

    async def disconnect(self, conn_id):
        # Socket.IO runs the handler before it drops the sid from its rooms
        await self.dispatcher.dispatch("disconnect", conn_id, "client disconnect")
        self.transport.drop(conn_id)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(transport):
    return Dispatcher(transport)


@pytest.fixture
def relay(dispatcher, transport):
    return Relay(dispatcher, transport)
