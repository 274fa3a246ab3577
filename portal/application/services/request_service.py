"""Service request queries — role-scoped visibility, filtering and stats."""

from http import HTTPStatus
from typing import Iterable, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from portal.core.exceptions import AppError, NotFound
from portal.domain.models.account import Role
from portal.domain.models.service_request import RequestStatus, ServiceRequest
from portal.domain.repositories.service_request_repository import ServiceRequestRepository
from portal.domain.schemas.auth import SessionIdentity
from portal.domain.schemas.service_request import RequestStats, ServiceRequestRead

logger = structlog.get_logger(__name__)


def list_requests(
    repo: ServiceRequestRepository, dealership_id: str, role: Role, email: str
) -> List[ServiceRequestRead]:
    """Managers and admins see the whole dealership; sales reps only their own requests."""
    requested_by = None if Role(role).is_privileged else email
    try:
        rows = repo.list_for_dealership(dealership_id, requested_by=requested_by)
    except SQLAlchemyError as exc:
        repo.rollback()
        logger.error("Service request query failed", dealership_id=dealership_id, error=str(exc))
        raise AppError("Could not load service requests", HTTPStatus.SERVICE_UNAVAILABLE) from exc
    return [ServiceRequestRead.model_validate(r) for r in rows]


def list_visible(repo: ServiceRequestRepository, identity: SessionIdentity) -> List[ServiceRequestRead]:
    return list_requests(repo, identity.dealership_id, identity.role, identity.email)


def get_visible(repo: ServiceRequestRepository, identity: SessionIdentity, request_id: int) -> ServiceRequest:
    """Fetch a request the identity is allowed to see, or raise NotFound."""
    try:
        request = repo.get_in_dealership(request_id, identity.dealership_id)
    except SQLAlchemyError as exc:
        repo.rollback()
        raise AppError("Could not load the service request", HTTPStatus.SERVICE_UNAVAILABLE) from exc

    if request is None or (not identity.role.is_privileged and request.requested_by != identity.email):
        raise NotFound(f"Service request {request_id} not found", details={"id": request_id})
    return request


def filter_by_status(
    requests: Iterable[ServiceRequestRead], status: Optional[RequestStatus] = None
) -> List[ServiceRequestRead]:
    if status is None:
        return list(requests)
    status = RequestStatus(status)
    return [r for r in requests if r.status == status]


def compute_stats(requests: Iterable[ServiceRequestRead]) -> RequestStats:
    """Aggregate over whatever set the caller is allowed to see."""
    stats = RequestStats()
    for r in requests:
        stats.total += 1
        if r.status == RequestStatus.PENDING:
            stats.pending += 1
            stats.amount_due += r.price
        elif r.status == RequestStatus.IN_PROGRESS:
            stats.in_progress += 1
            stats.amount_due += r.price
        elif r.status == RequestStatus.COMPLETED:
            stats.completed += 1
            stats.amount_paid += r.price
    return stats
