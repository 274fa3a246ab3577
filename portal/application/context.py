"""Application context — wires the portal core for one client session.

Presentation code builds one ``PortalContext`` at startup; ``start()`` runs
``restore()`` so a persisted login is resumed before the first screen.
"""

from functools import partial
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from portal.application.services.account_service import AccountDirectory
from portal.application.services.attempt_limiter import AttemptLimiter
from portal.application.services.lifecycle_service import RequestLifecycleManager
from portal.application.services.notification_service import NotificationBridge
from portal.application.services.recovery_service import PasswordRecoveryFlow
from portal.application.services.request_service import list_visible
from portal.application.services.session_service import SessionStore
from portal.config import Settings, get_settings
from portal.domain.models.account import Account
from portal.domain.models.service_request import ServiceRequest
from portal.infrastructure.broadcast import BroadcastHub
from portal.infrastructure.local_storage import JsonFileStorage, KeyValueStorage
from portal.infrastructure.repositories.account_repository import SQLAlchemyAccountRepository
from portal.infrastructure.repositories.service_request_repository import (
    SQLAlchemyServiceRequestRepository,
)

logger = structlog.get_logger(__name__)


class PortalContext:
    def __init__(
        self,
        db: Session,
        storage: KeyValueStorage,
        hub: Optional[BroadcastHub] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.db = db
        self.storage = storage
        self.hub = hub or BroadcastHub()

        self.account_repo = SQLAlchemyAccountRepository(db, Account)
        self.request_repo = SQLAlchemyServiceRequestRepository(db, ServiceRequest)
        self.limiter = AttemptLimiter(settings=self.settings)

        self.session = SessionStore(
            self.account_repo,
            storage,
            load_requests=partial(list_visible, self.request_repo),
            limiter=self.limiter,
            settings=self.settings,
        )
        self.notifications = NotificationBridge(
            self.session, self.hub.open(self.settings.BROADCAST_CHANNEL)
        )
        self.requests = RequestLifecycleManager(
            self.session, self.request_repo, notifier=self.notifications, settings=self.settings
        )
        self.accounts = AccountDirectory(self.session, self.account_repo, settings=self.settings)

    def recovery(self) -> PasswordRecoveryFlow:
        """A fresh password-recovery flow sharing this context's attempt limiter."""
        return PasswordRecoveryFlow(self.account_repo, limiter=self.limiter, settings=self.settings)

    @classmethod
    def start(
        cls,
        db: Optional[Session] = None,
        storage: Optional[KeyValueStorage] = None,
        hub: Optional[BroadcastHub] = None,
        settings: Optional[Settings] = None,
    ) -> "PortalContext":
        settings = settings or get_settings()
        if db is None:
            from portal.infrastructure.database import SessionLocal
            db = SessionLocal()
        if storage is None:
            storage = JsonFileStorage(settings.SESSION_STORAGE_PATH)

        context = cls(db, storage, hub=hub, settings=settings)
        identity = context.session.restore()
        logger.info("Portal context started", restored=identity is not None)
        return context

    def close(self) -> None:
        self.notifications.close()
        self.db.close()
