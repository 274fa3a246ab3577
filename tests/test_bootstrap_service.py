import unittest

from sqlalchemy.orm import sessionmaker

from portal.application.services.bootstrap_service import ensure_default_admin
from portal.application.context import PortalContext
from portal.config import Settings
from portal.domain.models.account import Account, Role
from portal.infrastructure.local_storage import MemoryStorage

from tests.support import make_engine


class TestDefaultAdmin(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()
        self.db = sessionmaker(bind=self.engine)()
        self.settings = Settings(_env_file=None)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_created_once_and_can_log_in(self):
        admin = ensure_default_admin(self.db, self.settings)
        again = ensure_default_admin(self.db, self.settings)
        self.assertEqual(admin.id, again.id)
        self.assertEqual(self.db.query(Account).count(), 1)

        context = PortalContext(self.db, MemoryStorage(), settings=self.settings)
        identity = context.session.login(self.settings.DEFAULT_ADMIN_EMAIL, self.settings.DEFAULT_ADMIN_PASSWORD)
        self.assertEqual(identity.role, Role.ADMIN)
        context.notifications.close()
