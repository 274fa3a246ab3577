"""Notification bridge — unread counter and live "new request" notices.

Creation events are posted on a broadcast channel so other open sessions of
the same profile learn about new requests without querying the data store.
Delivery is best effort: nothing is retried or kept for sessions that are
not listening at the time.
"""

from typing import Any, Callable, Dict, List

import structlog

from portal.application.services.session_service import SessionStore
from portal.domain.schemas.service_request import ServiceRequestRead
from portal.infrastructure.broadcast import BroadcastChannel

logger = structlog.get_logger(__name__)

REQUEST_CREATED = "request_created"

Notice = Dict[str, Any]


class NotificationBridge:
    def __init__(self, session: SessionStore, channel: BroadcastChannel):
        self.session = session
        self.channel = channel
        self.unread_count = 0
        self._listeners: List[Callable[[Notice], None]] = []
        self._unsubscribe = channel.subscribe(self._on_message)

    def on_notification(self, listener: Callable[[Notice], None]) -> Callable[[], None]:
        """Register a callback for notices received from other sessions."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def request_created(self, request: ServiceRequestRead) -> None:
        identity = self.session.identity
        if identity is not None and identity.role.is_privileged:
            self.unread_count += 1
        notice = {
            "type": REQUEST_CREATED,
            "dealership_id": request.dealership_id,
            "request_id": request.id,
            "request_number": request.request_number,
            "requested_by": request.requested_by,
        }
        delivered = self.channel.post_message(notice)
        logger.debug("New request broadcast", request_number=request.request_number, delivered=delivered)

    def acknowledge(self) -> None:
        """Mark everything as seen (the request list has been viewed)."""
        self.unread_count = 0

    def close(self) -> None:
        self._unsubscribe()
        self.channel.close()

    def _on_message(self, message: Notice) -> None:
        if message.get("type") != REQUEST_CREATED:
            return

        identity = self.session.identity
        if identity is None or not identity.role.is_privileged:
            return
        if message.get("dealership_id") != identity.dealership_id:
            return

        self.unread_count += 1
        for listener in list(self._listeners):
            listener(message)
