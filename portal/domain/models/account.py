"""Account domain model — maps to the 'accounts' table."""

import enum
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from portal.infrastructure.database import Base


class Role(str, enum.Enum):
    SALES_REP = "sales_rep"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def is_privileged(self) -> bool:
        """Managers and admins see and edit every request in the dealership."""
        return self in (Role.MANAGER, Role.ADMIN)


class SecurityQuestion(str, enum.Enum):
    FIRST_PET = "What was the name of your first pet?"
    BIRTH_CITY = "In what city were you born?"
    MOTHER_MAIDEN_NAME = "What is your mother's maiden name?"
    FIRST_CAR = "What was the make of your first car?"
    ELEMENTARY_SCHOOL = "What elementary school did you attend?"
    FAVORITE_TEACHER = "What was the name of your favorite teacher?"


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("dealership_id", "email", name="uq_accounts_dealership_email"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    dealership_id = Column(String(36), ForeignKey("dealerships.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default=Role.SALES_REP.value)
    password_hash = Column(String(64), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    security_question = Column(String(255), nullable=True)
    security_answer = Column(String(255), nullable=True)  # lower-cased, trimmed
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Account {self.email} ({self.role})>"
