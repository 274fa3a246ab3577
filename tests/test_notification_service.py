from portal.domain.models.account import Role
from portal.application.services.notification_service import REQUEST_CREATED

from tests.support import PortalTestCase, request_data


class TestNotificationBridge(PortalTestCase):
    def setUp(self):
        super().setUp()
        self.add_account("admin@dealership.com", role=Role.ADMIN)
        self.add_account("manager@dealership.com", role=Role.MANAGER)
        self.add_account("rep@dealership.com")

    def test_create_increments_and_acknowledge_resets(self):
        admin = self.login_as("admin@dealership.com")
        admin.requests.create(request_data())
        admin.requests.create(request_data())
        self.assertEqual(admin.notifications.unread_count, 2)

        admin.notifications.acknowledge()
        self.assertEqual(admin.notifications.unread_count, 0)

    def test_sales_rep_own_create_does_not_count(self):
        rep = self.login_as("rep@dealership.com")
        rep.requests.create(request_data())
        self.assertEqual(rep.notifications.unread_count, 0)

    def test_other_admin_session_gets_live_notice(self):
        watcher = self.login_as("admin@dealership.com")
        received = []
        watcher.notifications.on_notification(received.append)

        rep = self.login_as("rep@dealership.com")
        created = rep.requests.create(request_data())

        self.assertEqual(watcher.notifications.unread_count, 1)
        self.assertEqual(len(received), 1)
        self.assertEqual(received[0]["type"], REQUEST_CREATED)
        self.assertEqual(received[0]["request_number"], created.request_number)
        # the live notice does not touch the watcher's cached list
        self.assertEqual(watcher.session.requests, [])

    def test_only_privileged_sessions_of_same_dealership_count(self):
        other = self.add_dealership("Other Motors")
        self.add_account("boss@other.com", role=Role.ADMIN, dealership=other)

        manager = self.login_as("manager@dealership.com")
        outsider = self.login_as("boss@other.com")
        rep_watcher = self.login_as("rep@dealership.com")
        anonymous = self.new_context()

        self.login_as("rep@dealership.com").requests.create(request_data())

        self.assertEqual(manager.notifications.unread_count, 1)
        self.assertEqual(outsider.notifications.unread_count, 0)
        self.assertEqual(rep_watcher.notifications.unread_count, 0)
        self.assertEqual(anonymous.notifications.unread_count, 0)

    def test_failing_listener_does_not_break_creation(self):
        watcher = self.login_as("admin@dealership.com")

        def broken(notice):
            raise RuntimeError("render failed")

        watcher.notifications.on_notification(broken)
        created = self.login_as("rep@dealership.com").requests.create(request_data())
        self.assertEqual(created.request_number, "REQ-001")

    def test_closed_session_misses_notices(self):
        watcher = self.login_as("admin@dealership.com")
        watcher.notifications.close()

        self.login_as("rep@dealership.com").requests.create(request_data())
        self.assertEqual(watcher.notifications.unread_count, 0)
