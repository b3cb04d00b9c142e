"""
Relay error types
"""


class RelayError(Exception):
    """Base class for errors raised inside the relay"""


class MalformedPayload(RelayError):
    """An inbound event payload is missing a required field"""

    def __init__(self, event: str, field: str):
        super().__init__(f"{event}: missing '{field}'")
        self.event = event
        self.field = field
