"""Seed a local database with demo accounts and service requests.

Usage: python scripts/seed_demo.py
"""

from portal.application.services.bootstrap_service import ensure_default_admin
from portal.application.services.credential_service import hash_secret
from portal.core.logging import configure_logging
from portal.domain.models.account import Account, Role, SecurityQuestion
from portal.domain.models.service_request import RequestStatus, ServiceRequest
from portal.infrastructure.database import SessionLocal, init_db
from portal.infrastructure.repositories.service_request_repository import (
    SQLAlchemyServiceRequestRepository,
)

DEMO_PASSWORD = "demo1234"

DEMO_ACCOUNTS = [
    ("manager@dealership.com", "Manager", Role.MANAGER),
    ("robert@salesdealership.com", "Robert", Role.SALES_REP),
    ("sarah@service.com", "Sarah", Role.SALES_REP),
    ("maria@dealership.com", "Maria", Role.SALES_REP),
]

DEMO_REQUESTS = [
    {
        "requested_by": "robert@salesdealership.com",
        "stock_vin": "1HGCM82633A004352",
        "po_number": "PO-2024-001",
        "vehicle_description": "Customer vehicle - Trade-in",
        "year": 2023, "make": "Honda", "model": "Accord", "color": "Silver",
        "date_requested": "2026-02-23", "due_date": "2026-02-25", "due_time": "14:00",
        "main_services": ["N/C Delivery", "Clean for Showroom"],
        "additional_services": [],
        "notes": "Need ready before customer pickup",
        "status": RequestStatus.PENDING.value, "price": 0,
    },
    {
        "requested_by": "sarah@service.com",
        "stock_vin": "5FNYF4H75LB123456",
        "po_number": "PO-2024-002",
        "vehicle_description": "Lot vehicle",
        "year": 2022, "make": "Honda", "model": "Pilot", "color": "Black",
        "date_requested": "2026-02-23", "due_date": "2026-02-26", "due_time": "10:00",
        "main_services": ["U/C Detail"],
        "additional_services": ["Interior Protection"],
        "notes": "Full interior detail requested",
        "status": RequestStatus.IN_PROGRESS.value, "price": 250,
    },
    {
        "requested_by": "maria@dealership.com",
        "stock_vin": "2G1FB1E39D1234567",
        "vehicle_description": "Fleet vehicle",
        "year": 2013, "make": "Chevrolet", "model": "Malibu", "color": "Gray",
        "date_requested": "2026-02-22", "due_date": "2026-02-24", "due_time": "11:00",
        "main_services": [],
        "additional_services": ["Tint Removal"],
        "notes": "All windows, customer wants OEM look",
        "status": RequestStatus.COMPLETED.value, "price": 150,
    },
    {
        "requested_by": "robert@salesdealership.com",
        "stock_vin": "1G1FB1C56F2123456",
        "po_number": "PO-2024-003",
        "vehicle_description": "Wholesale vehicle",
        "year": 2015, "make": "Chevrolet", "model": "Cruze", "color": "Blue",
        "date_requested": "2026-02-23", "due_date": "2026-02-28", "due_time": "15:00",
        "main_services": [],
        "additional_services": ["Ozone Odor Removal"],
        "notes": "Odor issue, customer complaint",
        "status": RequestStatus.PENDING.value, "price": 0,
    },
]


def seed():
    configure_logging()
    init_db()

    db = SessionLocal()
    try:
        admin = ensure_default_admin(db)
        dealership_id = admin.dealership_id
        print(f"✅ Admin ready: {admin.email}")

        for email, name, role in DEMO_ACCOUNTS:
            exists = (
                db.query(Account)
                .filter(Account.dealership_id == dealership_id, Account.email == email)
                .first()
            )
            if exists:
                continue
            db.add(Account(
                dealership_id=dealership_id,
                email=email,
                name=name,
                role=role.value,
                password_hash=hash_secret(DEMO_PASSWORD),
                security_question=SecurityQuestion.FIRST_PET.value,
                security_answer="fluffy",
            ))
            print(f"👤 Account created: {email} ({role.value})")
        db.commit()

        repo = SQLAlchemyServiceRequestRepository(db, ServiceRequest)
        if repo.list_for_dealership(dealership_id):
            print("ℹ️  Requests already seeded, skipping")
            return

        for fields in DEMO_REQUESTS:
            created = repo.create_numbered(dealership_id, dict(fields))
            print(f"🚗 {created.request_number} — {created.year} {created.make} {created.model}")
    finally:
        db.close()

    print(f"\nDemo password for all seeded accounts: {DEMO_PASSWORD}")


if __name__ == "__main__":
    seed()
