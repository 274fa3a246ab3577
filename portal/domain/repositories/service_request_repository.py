"""
Service Request Repository Interface.
"""

from typing import Any, Dict, List, Optional

from portal.domain.repositories.base import BaseRepository
from portal.domain.models.service_request import ServiceRequest


class ServiceRequestRepository(BaseRepository[ServiceRequest]):
    """Interface for ServiceRequest-specific operations."""

    def list_for_dealership(self, dealership_id: str, requested_by: Optional[str] = None) -> List[ServiceRequest]:
        """Requests in a dealership, newest first, optionally only one author's."""
        ...

    def get_in_dealership(self, request_id: int, dealership_id: str) -> Optional[ServiceRequest]:
        ...

    def next_sequence(self, dealership_id: str) -> int:
        """Highest existing sequence in the dealership plus one."""
        ...

    def create_numbered(
        self, dealership_id: str, fields: Dict[str, Any], max_attempts: int = 5, prefix: str = "REQ-"
    ) -> ServiceRequest:
        """Insert with the next request number, retrying on a number collision."""
        ...
