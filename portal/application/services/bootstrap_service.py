"""Bootstrap — default dealership and administrator for a fresh database."""

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from portal.application.services.credential_service import hash_secret
from portal.config import Settings, get_settings
from portal.domain.models.account import Account, Role
from portal.domain.models.dealership import Dealership

logger = structlog.get_logger(__name__)


def get_or_create_dealership(db: Session, name: str) -> Dealership:
    dealership = db.query(Dealership).filter(Dealership.name == name).first()
    if dealership is None:
        dealership = Dealership(name=name)
        db.add(dealership)
        db.commit()
        db.refresh(dealership)
        logger.info("Dealership created", dealership=name)
    return dealership


def ensure_default_admin(db: Session, settings: Optional[Settings] = None) -> Account:
    """Create the default dealership and its admin account if they are missing."""
    settings = settings or get_settings()
    dealership = get_or_create_dealership(db, settings.DEFAULT_DEALERSHIP_NAME)

    admin = (
        db.query(Account)
        .filter(Account.dealership_id == dealership.id, Account.email == settings.DEFAULT_ADMIN_EMAIL)
        .first()
    )
    if admin is None:
        admin = Account(
            dealership_id=dealership.id,
            email=settings.DEFAULT_ADMIN_EMAIL,
            name="Admin",
            role=Role.ADMIN.value,
            password_hash=hash_secret(settings.DEFAULT_ADMIN_PASSWORD),
            is_active=True,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Default admin account created", email=settings.DEFAULT_ADMIN_EMAIL)
    return admin
