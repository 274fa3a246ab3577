"""
Account Repository Interface.
"""

from typing import List, Optional

from portal.domain.repositories.base import BaseRepository
from portal.domain.models.account import Account


class AccountRepository(BaseRepository[Account]):
    """Interface for Account-specific operations."""

    def find_by_email(self, email: str) -> Optional[Account]:
        """Look up an account by email across all dealerships."""
        ...

    def get_in_dealership(self, account_id: str, dealership_id: str) -> Optional[Account]:
        ...

    def list_for_dealership(self, dealership_id: str) -> List[Account]:
        ...
