"""Shared fixtures: in-memory database, seeded dealership and portal contexts."""

import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.application.context import PortalContext
from portal.application.services.credential_service import hash_secret
from portal.config import Settings
from portal.domain.models.account import Account, Role, SecurityQuestion
from portal.domain.models.dealership import Dealership
from portal.infrastructure.broadcast import BroadcastHub
from portal.infrastructure.database import init_db
from portal.infrastructure.local_storage import MemoryStorage

PASSWORD = "secret123"


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


def request_data(**overrides):
    data = {
        "stock_vin": "1HGCM82633A004352",
        "po_number": "PO-2024-001",
        "vehicle_description": "Customer vehicle - Trade-in",
        "year": 2023,
        "make": "Honda",
        "model": "Accord",
        "color": "Silver",
        "due_date": "2026-02-25",
        "due_time": "14:00",
        "main_services": ["N/C Delivery"],
        "additional_services": [],
        "notes": "Need ready before customer pickup",
    }
    data.update(overrides)
    return data


class PortalTestCase(unittest.TestCase):
    settings_overrides: dict = {}

    def setUp(self):
        self.engine = make_engine()
        self.db = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)()
        self.settings = Settings(_env_file=None, **self.settings_overrides)
        self.storage = MemoryStorage()
        self.hub = BroadcastHub()
        self.dealership = self.add_dealership("Test Dealership")
        self.contexts = []

    def tearDown(self):
        for context in self.contexts:
            context.notifications.close()
        self.db.close()
        self.engine.dispose()

    def add_dealership(self, name):
        dealership = Dealership(name=name)
        self.db.add(dealership)
        self.db.commit()
        return dealership

    def add_account(
        self,
        email,
        role=Role.SALES_REP,
        password=PASSWORD,
        dealership=None,
        is_active=True,
        question=SecurityQuestion.FIRST_PET,
        answer="fluffy",
    ):
        account = Account(
            dealership_id=(dealership or self.dealership).id,
            email=email,
            name=email.split("@")[0],
            role=role.value,
            password_hash=hash_secret(password),
            is_active=is_active,
            security_question=question.value if question else None,
            security_answer=answer,
        )
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        return account

    def new_context(self, storage=None):
        """A context sharing this test's database and broadcast hub (another tab)."""
        context = PortalContext(
            self.db,
            storage if storage is not None else self.storage,
            hub=self.hub,
            settings=self.settings,
        )
        self.contexts.append(context)
        return context

    def login_as(self, email, password=PASSWORD, storage=None):
        context = self.new_context(storage=storage if storage is not None else MemoryStorage())
        context.session.login(email, password)
        return context
