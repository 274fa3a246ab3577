"""
SQLAlchemy Implementation of Account Repository.
"""

from typing import List, Optional

from portal.domain.models.account import Account
from portal.domain.repositories.account_repository import AccountRepository
from portal.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyAccountRepository(SQLAlchemyRepository[Account], AccountRepository):
    """Account repository implementation using SQLAlchemy."""

    def find_by_email(self, email: str) -> Optional[Account]:
        # Emails are only unique per dealership; the oldest match wins.
        return (
            self.db.query(Account)
            .filter(Account.email == email)
            .order_by(Account.created_at.asc(), Account.id.asc())
            .first()
        )

    def get_in_dealership(self, account_id: str, dealership_id: str) -> Optional[Account]:
        return (
            self.db.query(Account)
            .filter(Account.id == account_id, Account.dealership_id == dealership_id)
            .first()
        )

    def list_for_dealership(self, dealership_id: str) -> List[Account]:
        return (
            self.db.query(Account)
            .filter(Account.dealership_id == dealership_id)
            .order_by(Account.email.asc())
            .all()
        )
