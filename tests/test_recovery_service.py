from portal.core.exceptions import (
    InvalidCredentials,
    NoRecoverySetup,
    NotFound,
    RecoveryStepError,
    TooManyAttempts,
    ValidationFailed,
    WrongAnswer,
)
from portal.application.services.recovery_service import RecoveryStep
from portal.domain.models.account import Account, SecurityQuestion

from tests.support import PASSWORD, PortalTestCase


class TestPasswordRecovery(PortalTestCase):
    def setUp(self):
        super().setUp()
        self.account = self.add_account("rep@dealership.com", answer="fluffy")
        self.flow = self.new_context().recovery()

    def stored_digest(self):
        return self.db.get(Account, self.account.id).password_hash

    def test_full_flow(self):
        challenge = self.flow.find_account("rep@dealership.com")
        self.assertEqual(challenge.security_question, SecurityQuestion.FIRST_PET)
        self.assertEqual(self.flow.step, RecoveryStep.QUESTION_DISPLAYED)

        self.flow.verify_answer(challenge.account_id, " Fluffy ")
        self.assertEqual(self.flow.step, RecoveryStep.ANSWER_VERIFIED)

        self.flow.reset_password(challenge.account_id, "brand-new", "brand-new")
        self.assertEqual(self.flow.step, RecoveryStep.PASSWORD_RESET)

        with self.assertRaises(InvalidCredentials):
            self.login_as("rep@dealership.com", PASSWORD)
        self.assertTrue(self.login_as("rep@dealership.com", "brand-new").session.is_authenticated)

    def test_unknown_email(self):
        with self.assertRaises(NotFound):
            self.flow.find_account("ghost@dealership.com")

    def test_account_without_question(self):
        self.add_account("legacy@dealership.com", question=None, answer=None)
        with self.assertRaises(NoRecoverySetup):
            self.flow.find_account("legacy@dealership.com")

    def test_unrecognised_stored_question(self):
        account = self.add_account("imported@dealership.com")
        account.security_question = "What is your favourite colour?"
        self.db.commit()

        with self.assertRaises(NoRecoverySetup):
            self.flow.find_account("imported@dealership.com")
        self.assertEqual(self.flow.step, RecoveryStep.EMAIL_ENTRY)

    def test_wrong_answer(self):
        self.flow.find_account("rep@dealership.com")
        with self.assertRaises(WrongAnswer):
            self.flow.verify_answer(self.account.id, "rex")
        self.assertEqual(self.flow.step, RecoveryStep.QUESTION_DISPLAYED)

    def test_mismatched_confirmation_keeps_credential(self):
        digest = self.stored_digest()
        self.flow.find_account("rep@dealership.com")
        self.flow.verify_answer(self.account.id, "fluffy")

        with self.assertRaises(ValidationFailed):
            self.flow.reset_password(self.account.id, "brand-new", "brand-old")
        with self.assertRaises(ValidationFailed):
            self.flow.reset_password(self.account.id, "short", "short")

        self.assertEqual(self.stored_digest(), digest)
        self.assertEqual(self.flow.step, RecoveryStep.ANSWER_VERIFIED)

    def test_steps_cannot_be_skipped_or_replayed(self):
        with self.assertRaises(RecoveryStepError):
            self.flow.verify_answer(self.account.id, "fluffy")

        self.flow.find_account("rep@dealership.com")
        with self.assertRaises(RecoveryStepError):
            self.flow.reset_password(self.account.id, "brand-new", "brand-new")

        self.flow.verify_answer(self.account.id, "fluffy")
        self.flow.reset_password(self.account.id, "brand-new", "brand-new")
        with self.assertRaises(RecoveryStepError):
            self.flow.reset_password(self.account.id, "another-one", "another-one")

        self.flow.find_account("rep@dealership.com")
        self.assertEqual(self.flow.step, RecoveryStep.QUESTION_DISPLAYED)

    def test_answer_must_target_the_found_account(self):
        other = self.add_account("other@dealership.com")
        self.flow.find_account("rep@dealership.com")
        with self.assertRaises(RecoveryStepError):
            self.flow.verify_answer(other.id, "fluffy")


class TestRecoveryAttemptLimiting(PortalTestCase):
    settings_overrides = {"AUTH_MAX_ATTEMPTS": 2}

    def test_lockout_on_repeated_wrong_answers(self):
        account = self.add_account("rep@dealership.com", answer="fluffy")
        flow = self.new_context().recovery()
        flow.find_account("rep@dealership.com")
        for _ in range(2):
            with self.assertRaises(WrongAnswer):
                flow.verify_answer(account.id, "rex")
        with self.assertRaises(TooManyAttempts):
            flow.verify_answer(account.id, "fluffy")
