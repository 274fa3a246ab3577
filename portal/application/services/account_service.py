"""Account directory — admin-only provisioning, reset, activation and deletion."""

from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portal.application.services.credential_service import generate_secret, hash_secret
from portal.application.services.session_service import SessionStore
from portal.config import Settings, get_settings
from portal.core.exceptions import DuplicateEmail, MutationFailed, NotFound, ValidationFailed
from portal.domain.models.account import Account, Role
from portal.domain.repositories.account_repository import AccountRepository
from portal.domain.schemas.account import AccountCreate, AccountCreated, AccountRead
from portal.domain.schemas.auth import SessionIdentity

logger = structlog.get_logger(__name__)


class AccountDirectory:
    def __init__(self, session: SessionStore, repo: AccountRepository, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.session = session
        self.repo = repo

    def _require_admin(self) -> SessionIdentity:
        return self.session.require_role(Role.ADMIN)

    def _get(self, admin: SessionIdentity, account_id: str) -> Account:
        try:
            account = self.repo.get_in_dealership(account_id, admin.dealership_id)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            raise MutationFailed("Could not load the account") from exc
        if account is None:
            raise NotFound("Account not found", details={"id": account_id})
        return account

    def _save(self, account: Account, changes: Dict[str, Any], action: str) -> Account:
        try:
            return self.repo.update(account, changes)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Account update failed", action=action, error=str(exc))
            raise MutationFailed(f"Failed to {action}") from exc

    def list_accounts(self) -> List[AccountRead]:
        """Accounts in the admin's dealership. A failed query yields an empty list."""
        admin = self._require_admin()
        try:
            accounts = self.repo.list_for_dealership(admin.dealership_id)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.warning("Listing accounts failed", error=str(exc))
            return []
        return [AccountRead.model_validate(a) for a in accounts]

    def create_account(self, data: Union[AccountCreate, Dict[str, Any]]) -> AccountCreated:
        admin = self._require_admin()
        if not isinstance(data, AccountCreate):
            try:
                data = AccountCreate.model_validate(data)
            except ValidationError as exc:
                raise ValidationFailed("; ".join(e["msg"] for e in exc.errors())) from exc

        generated = None
        password = data.password
        if not password:
            password = generated = generate_secret(self.settings.GENERATED_PASSWORD_LENGTH)
        elif len(password) < self.settings.MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {self.settings.MIN_PASSWORD_LENGTH} characters"
            )

        fields = {
            "dealership_id": admin.dealership_id,
            "email": data.email,
            "name": data.name,
            "role": data.role.value,
            "password_hash": hash_secret(password),
            "is_active": True,
            "security_question": data.security_question.value,
            "security_answer": data.security_answer,
        }

        try:
            account = self.repo.create(fields)
        except IntegrityError as exc:
            self.repo.rollback()
            logger.info("Account creation rejected", email=data.email, reason="duplicate_email")
            raise DuplicateEmail(details={"email": data.email}) from exc
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Account creation failed", email=data.email, error=str(exc))
            raise MutationFailed("Failed to create account") from exc

        logger.info("Account created", account_email=account.email, account_role=account.role)
        return AccountCreated(account=AccountRead.model_validate(account), generated_password=generated)

    def reset_password(self, account_id: str) -> str:
        """Issue a new random password. The plaintext is returned once and never stored."""
        admin = self._require_admin()
        account = self._get(admin, account_id)
        secret = generate_secret(self.settings.GENERATED_PASSWORD_LENGTH)
        self._save(account, {"password_hash": hash_secret(secret)}, "reset password")
        logger.info("Password reset by admin", account_email=account.email)
        return secret

    def set_active(self, account_id: str, active: bool) -> AccountRead:
        admin = self._require_admin()
        account = self._get(admin, account_id)
        account = self._save(account, {"is_active": bool(active)}, "update account")
        logger.info("Account activation changed", account_email=account.email, active=account.is_active)
        return AccountRead.model_validate(account)

    def delete_account(self, account_id: str) -> None:
        """Hard delete. Requests created by the account keep its email."""
        admin = self._require_admin()
        account = self._get(admin, account_id)
        email = account.email
        try:
            self.repo.delete(account.id)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Account deletion failed", account_email=email, error=str(exc))
            raise MutationFailed("Failed to delete account") from exc
        logger.info("Account deleted", account_email=email)
