"""Request lifecycle — creation, status/price/schedule mutation and derived stats.

Every mutation goes to the data store first; the session's request cache is
patched only after the write succeeds, so a failure leaves local state as it
was.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

import pytz
import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from portal.application.services import request_service
from portal.application.services.export_service import export_requests_csv
from portal.application.services.session_service import SessionStore
from portal.config import Settings, get_settings
from portal.core.exceptions import MutationFailed, ValidationFailed
from portal.domain.models.service_request import RequestStatus, ServiceRequest, can_transition
from portal.domain.repositories.service_request_repository import ServiceRequestRepository
from portal.domain.schemas.service_request import (
    PriceUpdate,
    RequestDatesUpdate,
    RequestStats,
    ServiceRequestCreate,
    ServiceRequestRead,
)

logger = structlog.get_logger(__name__)


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(err["msg"] for err in exc.errors())


class RequestLifecycleManager:
    def __init__(
        self,
        session: SessionStore,
        repo: ServiceRequestRepository,
        notifier=None,
        settings: Optional[Settings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session
        self.repo = repo
        self.notifier = notifier
        self._tz = pytz.timezone(self.settings.TIMEZONE)
        self._today = today or (lambda: datetime.now(self._tz).date())

    # --- Reads ---

    def list_requests(self, status: Optional[Union[RequestStatus, str]] = None) -> List[ServiceRequestRead]:
        """Visible requests, newest first, optionally narrowed to one status."""
        self.session.require_identity()
        try:
            return request_service.filter_by_status(self.session.requests, status)
        except ValueError as exc:
            raise ValidationFailed(f"Unknown status: {status}") from exc

    def refresh(self) -> List[ServiceRequestRead]:
        self.session.require_identity()
        return self.session.reload_requests()

    def stats(self) -> RequestStats:
        self.session.require_identity()
        return request_service.compute_stats(self.session.requests)

    def export_csv(self, status: Optional[Union[RequestStatus, str]] = None) -> str:
        return export_requests_csv(self.list_requests(status))

    # --- Mutations ---

    def create(self, data: Union[ServiceRequestCreate, Dict[str, Any]]) -> ServiceRequestRead:
        identity = self.session.require_identity()
        if not isinstance(data, ServiceRequestCreate):
            try:
                data = ServiceRequestCreate.model_validate(data)
            except ValidationError as exc:
                raise ValidationFailed(_validation_message(exc)) from exc

        fields = data.model_dump()
        fields.update(
            requested_by=identity.email,
            status=RequestStatus.PENDING.value,
            price=0,
            date_requested=self._today().isoformat(),
        )

        try:
            db_obj = self.repo.create_numbered(
                identity.dealership_id,
                fields,
                max_attempts=self.settings.REQUEST_NUMBER_MAX_ATTEMPTS,
                prefix=self.settings.REQUEST_NUMBER_PREFIX,
            )
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Creating service request failed", error=str(exc))
            raise MutationFailed("Failed to submit the service request") from exc

        created = ServiceRequestRead.model_validate(db_obj)
        self.session.prepend_request(created)
        logger.info("Service request created", request_number=created.request_number, id=created.id)

        if self.notifier is not None:
            self.notifier.request_created(created)
        return created

    def set_status(self, request_id: int, status: Union[RequestStatus, str]) -> ServiceRequestRead:
        self.session.require_privileged()
        try:
            target = RequestStatus(status)
        except ValueError as exc:
            raise ValidationFailed(f"Unknown status: {status}") from exc

        db_obj = self._load(request_id)
        current = RequestStatus(db_obj.status)
        if not can_transition(current, target):
            raise ValidationFailed(f"Cannot move a request from {current.value} to {target.value}")

        updated = self._apply(db_obj, {"status": target.value})
        logger.info("Service request status changed", id=request_id, old=current.value, new=target.value)
        return updated

    def set_price(self, request_id: int, price: float) -> ServiceRequestRead:
        self.session.require_privileged()
        try:
            price = PriceUpdate(price=price).price
        except ValidationError as exc:
            raise ValidationFailed(_validation_message(exc)) from exc

        db_obj = self._load(request_id)
        updated = self._apply(db_obj, {"price": price})
        logger.info("Service request price changed", id=request_id, price=price)
        return updated

    def set_dates(
        self, request_id: int, partial: Union[RequestDatesUpdate, Dict[str, Any]]
    ) -> ServiceRequestRead:
        """Merge the provided schedule fields; empty values leave the stored value alone."""
        self.session.require_privileged()
        if not isinstance(partial, RequestDatesUpdate):
            try:
                partial = RequestDatesUpdate.model_validate(partial)
            except ValidationError as exc:
                raise ValidationFailed(_validation_message(exc)) from exc

        db_obj = self._load(request_id)
        changes = partial.changes()
        if not changes:
            return ServiceRequestRead.model_validate(db_obj)

        updated = self._apply(db_obj, changes)
        logger.info("Service request schedule changed", id=request_id, fields=sorted(changes))
        return updated

    # --- Internals ---

    def _load(self, request_id: int) -> ServiceRequest:
        identity = self.session.require_identity()
        return request_service.get_visible(self.repo, identity, request_id)

    def _apply(self, db_obj: ServiceRequest, changes: Dict[str, Any]) -> ServiceRequestRead:
        request_id = db_obj.id
        try:
            db_obj = self.repo.update(db_obj, changes)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Updating service request failed", id=request_id, error=str(exc))
            raise MutationFailed("Failed to update the service request") from exc

        updated = ServiceRequestRead.model_validate(db_obj)
        self.session.replace_request(updated)
        return updated
