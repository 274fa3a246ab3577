"""Service request domain model — maps to the 'service_requests' table."""

import enum

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, JSON, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.sql import func

from portal.infrastructure.database import Base


class RequestStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    """Decide whether a request may move from ``current`` to ``target``.

    Every transition is allowed, including backwards moves and re-setting the
    same status: staff need manual override. An ordering policy belongs here.
    """
    return current in RequestStatus and target in RequestStatus


class ServiceRequest(Base):
    __tablename__ = "service_requests"
    __table_args__ = (
        UniqueConstraint("dealership_id", "sequence", name="uq_service_requests_dealership_sequence"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dealership_id = Column(String(36), ForeignKey("dealerships.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    request_number = Column(String(20), nullable=False, index=True)

    # Ownership (no FK: requests outlive deleted accounts)
    requested_by = Column(String(255), nullable=False, index=True)
    manager = Column(String(255), nullable=True)

    # Vehicle
    stock_vin = Column(String(50), nullable=False)
    po_number = Column(String(50), nullable=True)
    vehicle_description = Column(Text, nullable=True)
    year = Column(Integer, nullable=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)

    # Scheduling (ISO dates, HH:MM times)
    date_requested = Column(String(10), nullable=False)
    due_date = Column(String(10), nullable=True)
    due_time = Column(String(5), nullable=True)
    start_date = Column(String(10), nullable=True)
    start_time = Column(String(5), nullable=True)
    completion_date = Column(String(10), nullable=True)
    completion_time = Column(String(5), nullable=True)

    main_services = Column(JSON, nullable=False, default=list)
    additional_services = Column(JSON, nullable=False, default=list)

    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<ServiceRequest {self.request_number} - {self.status}>"
