"""Password recovery via security question.

A three-step flow: find the account, answer its question, choose a new
password. Each instance tracks one recovery attempt; after a successful reset
it must be restarted from the first step.
"""

import enum
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from portal.application.services.attempt_limiter import AttemptLimiter
from portal.application.services.credential_service import hash_secret
from portal.config import Settings, get_settings
from portal.core.exceptions import (
    LoginFailed,
    MutationFailed,
    NoRecoverySetup,
    NotFound,
    RecoveryStepError,
    ValidationFailed,
    WrongAnswer,
)
from portal.domain.models.account import Account, SecurityQuestion
from portal.domain.repositories.account_repository import AccountRepository
from portal.domain.schemas.account import RecoveryChallenge, normalize_answer

logger = structlog.get_logger(__name__)


class RecoveryStep(str, enum.Enum):
    EMAIL_ENTRY = "email_entry"
    QUESTION_DISPLAYED = "question_displayed"
    ANSWER_VERIFIED = "answer_verified"
    PASSWORD_RESET = "password_reset"


class PasswordRecoveryFlow:
    def __init__(
        self,
        repo: AccountRepository,
        limiter: Optional[AttemptLimiter] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repo = repo
        self.limiter = limiter or AttemptLimiter(settings=self.settings)
        self.step = RecoveryStep.EMAIL_ENTRY
        self.account_id: Optional[str] = None

    def restart(self) -> None:
        self.step = RecoveryStep.EMAIL_ENTRY
        self.account_id = None

    def find_account(self, email: str) -> RecoveryChallenge:
        """Step 1. Always allowed; starts the flow over."""
        self.restart()
        try:
            account = self.repo.find_by_email(email.strip())
        except SQLAlchemyError as exc:
            self.repo.rollback()
            raise LoginFailed("Could not reach the account service") from exc

        if account is None:
            raise NotFound("No account found with that email")
        if not account.security_question or not account.security_answer:
            raise NoRecoverySetup()
        try:
            question = SecurityQuestion(account.security_question)
        except ValueError as exc:
            logger.warning("Stored security question is not recognised", account_email=account.email)
            raise NoRecoverySetup() from exc

        self.account_id = account.id
        self.step = RecoveryStep.QUESTION_DISPLAYED
        return RecoveryChallenge(
            account_id=account.id,
            email=account.email,
            security_question=question,
        )

    def verify_answer(self, account_id: str, answer: str) -> None:
        """Step 2. Trimmed, case-insensitive comparison."""
        self._expect(RecoveryStep.QUESTION_DISPLAYED, account_id)
        self.limiter.check(f"recovery:{account_id}")

        account = self._load(account_id)
        if normalize_answer(answer) != normalize_answer(account.security_answer or ""):
            self.limiter.record_failure(f"recovery:{account_id}")
            logger.info("Security answer rejected", account_email=account.email)
            raise WrongAnswer()

        self.limiter.reset(f"recovery:{account_id}")
        self.step = RecoveryStep.ANSWER_VERIFIED

    def reset_password(self, account_id: str, new_secret: str, confirm_secret: str) -> None:
        """Step 3. On failure the stored credential is left untouched."""
        self._expect(RecoveryStep.ANSWER_VERIFIED, account_id)

        if new_secret != confirm_secret:
            raise ValidationFailed("Passwords do not match")
        if len(new_secret) < self.settings.MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {self.settings.MIN_PASSWORD_LENGTH} characters"
            )

        account = self._load(account_id)
        try:
            self.repo.update(account, {"password_hash": hash_secret(new_secret)})
        except SQLAlchemyError as exc:
            self.repo.rollback()
            logger.error("Password recovery write failed", error=str(exc))
            raise MutationFailed("Failed to reset password") from exc

        self.step = RecoveryStep.PASSWORD_RESET
        logger.info("Password reset via recovery", account_email=account.email)

    def _expect(self, step: RecoveryStep, account_id: str) -> None:
        if self.step != step or self.account_id != account_id:
            raise RecoveryStepError()

    def _load(self, account_id: str) -> Account:
        try:
            account = self.repo.get_by_id(account_id)
        except SQLAlchemyError as exc:
            self.repo.rollback()
            raise LoginFailed("Could not reach the account service") from exc
        if account is None:
            raise NotFound("No account found")
        return account
