"""Pydantic schemas for Account provisioning and recovery."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from portal.domain.models.account import Role, SecurityQuestion


def normalize_answer(answer: str) -> str:
    return answer.strip().lower()


class AccountCreate(BaseModel):
    email: str
    name: Optional[str] = None
    role: Role = Role.SALES_REP
    password: Optional[str] = None  # generated when omitted
    security_question: SecurityQuestion
    security_answer: str

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v or "@" not in v:
            raise ValueError("A valid email is required")
        return v

    @field_validator("security_answer")
    @classmethod
    def answer_normalized(cls, v: str) -> str:
        v = normalize_answer(v)
        if not v:
            raise ValueError("A security answer is required")
        return v


class AccountRead(BaseModel):
    id: str
    dealership_id: str
    email: str
    name: Optional[str] = None
    role: Role
    is_active: bool
    security_question: Optional[SecurityQuestion] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("security_question", mode="before")
    @classmethod
    def unknown_question_is_unset(cls, v):
        # rows written outside the portal may hold free-text questions
        if v is None or isinstance(v, SecurityQuestion):
            return v
        try:
            return SecurityQuestion(v)
        except ValueError:
            return None


class AccountCreated(BaseModel):
    account: AccountRead
    generated_password: Optional[str] = None  # shown once, never stored


class RecoveryChallenge(BaseModel):
    account_id: str
    email: str
    security_question: SecurityQuestion
