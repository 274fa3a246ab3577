"""Dealership domain model — the single tenant every record is scoped to."""

import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from portal.infrastructure.database import Base


class Dealership(Base):
    __tablename__ = "dealerships"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Dealership {self.name}>"
