"""
Publish/subscribe channel between open sessions of the same profile.

Semantics follow the browser BroadcastChannel: a message posted on a channel
reaches every *other* open channel with the same name, synchronously and
at most once. Delivery is best effort; nothing is queued for channels that
are closed or not yet open.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Set

import structlog

logger = structlog.get_logger(__name__)

Message = Dict[str, Any]
Listener = Callable[[Message], None]


class BroadcastHub:
    """Registry of open channels, one per profile."""

    def __init__(self):
        self._channels: Dict[str, Set["BroadcastChannel"]] = defaultdict(set)

    def open(self, name: str) -> "BroadcastChannel":
        channel = BroadcastChannel(name, self)
        self._channels[name].add(channel)
        return channel

    def _detach(self, channel: "BroadcastChannel") -> None:
        self._channels[channel.name].discard(channel)

    def _deliver(self, sender: "BroadcastChannel", message: Message) -> int:
        delivered = 0
        for channel in list(self._channels[sender.name]):
            if channel is sender:
                continue
            if channel._dispatch(message):
                delivered += 1
        return delivered


class BroadcastChannel:
    def __init__(self, name: str, hub: BroadcastHub):
        self.name = name
        self._hub = hub
        self._listeners: List[Listener] = []
        self.closed = False

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def post_message(self, message: Message) -> int:
        """Send to the other open channels; returns how many received it."""
        if self.closed:
            logger.debug("Post on closed channel dropped", channel=self.name)
            return 0
        return self._hub._deliver(self, dict(message))

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()
        self._hub._detach(self)

    def _dispatch(self, message: Message) -> bool:
        ok = True
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                ok = False
                logger.exception("Broadcast listener failed", channel=self.name)
        return ok
