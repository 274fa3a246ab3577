"""Session store — authentication, persisted identity and the visible request cache.

One instance is owned by the application context and passed to every
component that needs the current identity. The identity snapshot is mirrored
to client-local storage so a restart restores the session without asking for
credentials again.
"""

import enum
from typing import Callable, List, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from portal.application.services.attempt_limiter import AttemptLimiter
from portal.application.services.credential_service import verify_secret
from portal.config import Settings, get_settings
from portal.core.exceptions import (
    AccountInactive,
    AppError,
    InvalidCredentials,
    LoginFailed,
    NotAuthenticated,
    PermissionDenied,
)
from portal.core.logging import bind_session_context, clear_session_context
from portal.domain.models.account import Role
from portal.domain.repositories.account_repository import AccountRepository
from portal.domain.schemas.auth import SessionIdentity, SessionSnapshot
from portal.domain.schemas.service_request import ServiceRequestRead
from portal.infrastructure.local_storage import KeyValueStorage

logger = structlog.get_logger(__name__)

RequestLoader = Callable[[SessionIdentity], List[ServiceRequestRead]]


class SessionState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionStore:
    def __init__(
        self,
        accounts: AccountRepository,
        storage: KeyValueStorage,
        load_requests: Optional[RequestLoader] = None,
        limiter: Optional[AttemptLimiter] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.accounts = accounts
        self.storage = storage
        self.load_requests = load_requests
        self.limiter = limiter or AttemptLimiter(settings=self.settings)
        self.identity: Optional[SessionIdentity] = None
        self.requests: List[ServiceRequestRead] = []

    @property
    def state(self) -> SessionState:
        return SessionState.AUTHENTICATED if self.identity else SessionState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    # --- Transitions ---

    def login(self, email: str, secret: str) -> SessionIdentity:
        email = email.strip()
        self.limiter.check(email)

        try:
            account = self.accounts.find_by_email(email)
        except SQLAlchemyError as exc:
            self.accounts.rollback()
            logger.error("Credential lookup failed", email=email, error=str(exc))
            raise LoginFailed() from exc

        if account is None:
            self.limiter.record_failure(email)
            logger.info("Login rejected", email=email, reason="unknown_email")
            raise InvalidCredentials()

        if not account.is_active:
            logger.info("Login rejected", email=email, reason="inactive")
            raise AccountInactive()

        if not verify_secret(secret, account.password_hash):
            self.limiter.record_failure(email)
            logger.info("Login rejected", email=email, reason="bad_credentials")
            raise InvalidCredentials()

        self.limiter.reset(email)
        identity = SessionIdentity.model_validate(account)
        self.storage.set(
            self.settings.SESSION_STORAGE_KEY,
            SessionSnapshot(user=identity).model_dump_json(),
        )
        self._enter(identity)
        logger.info("Login succeeded")
        return identity

    def logout(self) -> None:
        if self.identity:
            logger.info("Logged out")
        self.identity = None
        self.requests = []
        self.storage.remove(self.settings.SESSION_STORAGE_KEY)
        clear_session_context()

    def restore(self) -> Optional[SessionIdentity]:
        """Resume the persisted session, if any. Credentials are not re-checked."""
        raw = self.storage.get(self.settings.SESSION_STORAGE_KEY)
        if raw is None:
            return None

        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed session snapshot")
            self.storage.remove(self.settings.SESSION_STORAGE_KEY)
            return None

        self._enter(snapshot.user)
        logger.info("Session restored")
        return snapshot.user

    def _enter(self, identity: SessionIdentity) -> None:
        self.identity = identity
        self.requests = []
        bind_session_context(identity)
        self.reload_requests()

    # --- Guards ---

    def require_identity(self) -> SessionIdentity:
        if self.identity is None:
            raise NotAuthenticated()
        return self.identity

    def require_role(self, *roles: Role) -> SessionIdentity:
        identity = self.require_identity()
        if identity.role not in roles:
            logger.info("Permission denied", required=[r.value for r in roles])
            raise PermissionDenied()
        return identity

    def require_privileged(self) -> SessionIdentity:
        return self.require_role(Role.MANAGER, Role.ADMIN)

    # --- Request cache ---

    def reload_requests(self) -> List[ServiceRequestRead]:
        """Replace the cache wholesale. A failed load keeps the session and the old cache."""
        if self.identity is None or self.load_requests is None:
            return self.requests
        try:
            self.requests = self.load_requests(self.identity)
        except AppError as exc:
            logger.error("Loading service requests failed", error=exc.message)
        return self.requests

    def prepend_request(self, request: ServiceRequestRead) -> None:
        self.requests = [request] + [r for r in self.requests if r.id != request.id]

    def replace_request(self, request: ServiceRequestRead) -> None:
        self.requests = [request if r.id == request.id else r for r in self.requests]
