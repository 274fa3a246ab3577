"""
SQLAlchemy Implementation of Service Request Repository.
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from portal.config import get_settings
from portal.core.exceptions import MutationFailed
from portal.domain.models.service_request import ServiceRequest
from portal.domain.repositories.service_request_repository import ServiceRequestRepository
from portal.infrastructure.repositories.base_repository import SQLAlchemyRepository

settings = get_settings()
logger = structlog.get_logger(__name__)


def format_request_number(sequence: int, prefix: str = settings.REQUEST_NUMBER_PREFIX) -> str:
    return f"{prefix}{sequence:03d}"


class SQLAlchemyServiceRequestRepository(SQLAlchemyRepository[ServiceRequest], ServiceRequestRepository):
    """Service request repository implementation using SQLAlchemy."""

    def list_for_dealership(self, dealership_id: str, requested_by: Optional[str] = None) -> List[ServiceRequest]:
        query = self.db.query(ServiceRequest).filter(ServiceRequest.dealership_id == dealership_id)

        if requested_by is not None:
            query = query.filter(ServiceRequest.requested_by == requested_by)

        return query.order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc()).all()

    def get_in_dealership(self, request_id: int, dealership_id: str) -> Optional[ServiceRequest]:
        return (
            self.db.query(ServiceRequest)
            .filter(ServiceRequest.id == request_id, ServiceRequest.dealership_id == dealership_id)
            .first()
        )

    def next_sequence(self, dealership_id: str) -> int:
        highest = (
            self.db.query(func.max(ServiceRequest.sequence))
            .filter(ServiceRequest.dealership_id == dealership_id)
            .scalar()
        )
        return (highest or 0) + 1

    def create_numbered(
        self,
        dealership_id: str,
        fields: Dict[str, Any],
        max_attempts: int = 5,
        prefix: str = settings.REQUEST_NUMBER_PREFIX,
    ) -> ServiceRequest:
        """Insert a request under the next free number.

        Two sessions can read the same maximum; the unique
        (dealership_id, sequence) constraint rejects the loser, which re-reads
        and tries the following number. A failure that leaves the next number
        unchanged was not a collision and is re-raised.
        """
        failed: Optional[IntegrityError] = None
        failed_sequence = None
        for attempt in range(1, max_attempts + 1):
            sequence = self.next_sequence(dealership_id)
            if failed is not None and sequence == failed_sequence:
                raise failed
            db_obj = ServiceRequest(
                **fields,
                dealership_id=dealership_id,
                sequence=sequence,
                request_number=format_request_number(sequence, prefix),
            )
            self.db.add(db_obj)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                failed, failed_sequence = exc, sequence
                logger.warning(
                    "Request number collision, retrying",
                    dealership_id=dealership_id,
                    sequence=sequence,
                    attempt=attempt,
                )
                continue
            self.db.refresh(db_obj)
            return db_obj

        raise MutationFailed(
            "Could not assign a request number. Please try again.",
            details={"dealership_id": dealership_id, "attempts": max_attempts},
        )
