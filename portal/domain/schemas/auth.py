"""Pydantic schemas for the authenticated identity and its stored snapshot."""

from pydantic import BaseModel
from typing import Optional

from portal.domain.models.account import Role


class SessionIdentity(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: Role
    dealership_id: str

    model_config = {"from_attributes": True, "frozen": True}


class SessionSnapshot(BaseModel):
    """Shape persisted to client-local storage under the session key."""
    user: SessionIdentity

