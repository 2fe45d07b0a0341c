"""
Contract with the channel provider (can implement for WebRTC data channels / websockets etc.)

The core only needs an ordered, reliable, fire-and-forget `send`. Inbound messages and connection changes are
pushed into the PeerSession by whoever owns the channel (`receive`, `on_connected`, `on_disconnected`).
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Optional, Protocol

from fogline.core.exceptions import TransportError

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], None]


class Transport(Protocol):
    """Reliable, FIFO channel to the opponent"""

    def send(self, message: str) -> None:
        """Queue a message for the opponent. Raises TransportError if the channel is gone."""
        ...


class LoopbackTransport:
    """
    In-memory channel between two peers in the same process (offline play and tests).

    Messages are queued on the receiving end and only delivered by `pump()`, so a peer always finishes
    its current action before the opponent reacts to it.
    """

    def __init__(self) -> None:
        self.peer: Optional[LoopbackTransport] = None
        self.handler: Optional[MessageHandler] = None
        self.inbox: deque[str] = deque()
        self.sent: list[str] = []
        self.open = False

    @classmethod
    def pair(cls) -> tuple[LoopbackTransport, LoopbackTransport]:
        first, second = cls(), cls()
        first.peer, second.peer = second, first
        first.open = second.open = True
        return first, second

    def bind(self, handler: MessageHandler) -> None:
        """Where inbound messages go (normally `PeerSession.receive`)"""
        self.handler = handler

    def send(self, message: str) -> None:
        if not self.open or self.peer is None or not self.peer.open:
            raise TransportError("Channel is closed.")
        self.sent.append(message)
        self.peer.inbox.append(message)

    def close(self) -> None:
        self.open = False
        if self.peer is not None:
            self.peer.open = False

    def deliver_next(self) -> bool:
        """Deliver the oldest queued inbound message. Returns False if there was nothing to deliver."""
        if not self.inbox:
            return False
        if self.handler is None:
            raise TransportError("No handler bound to receive messages.")
        self.handler(self.inbox.popleft())
        return True


def pump(*transports: LoopbackTransport) -> int:
    """Deliver queued messages on all transports until every inbox is empty. Returns the number delivered."""
    delivered = 0
    while any(transport.inbox for transport in transports):
        for transport in transports:
            while transport.deliver_next():
                delivered += 1
    logger.debug("Delivered %d loopback messages", delivered)
    return delivered
