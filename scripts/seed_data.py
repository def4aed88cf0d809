"""Seed the database with a demo company, one ship and a few crew accounts."""

import asyncio

from crewdesk.db.engine import async_session_factory, create_tables
from crewdesk.db import crud
from crewdesk.dependencies import get_credential_engine
from crewdesk.models import Ship
from crewdesk.models.enums import Role
from crewdesk.services import accounts
from crewdesk.services.company_bootstrap import create_company
from crewdesk.services.principal import Principal

DEMO_COMPANY = "Demo Shipping Co"
DEMO_CREW = [
    ("DEMO-1001", "Ana Reyes", "Master", "Onboard"),
    ("DEMO-1002", "Tomas Berg", "Chief Engineer", "Onboard"),
    ("DEMO-1003", "Lena Okafor", "Cadet", "Offboard"),
]


async def seed():
    await create_tables()
    engine = get_credential_engine()
    operator = Principal(user_id=0, role=Role.SUPERADMIN)

    async with async_session_factory() as db:
        if await crud.username_taken(db, "demo.admin"):
            print("Demo company already exists, skipping seed.")
            return

        company, admin = await create_company(
            db, operator, {"company_name": DEMO_COMPANY}, "demo.admin", "demo-admin-pass", engine,
        )
        print(f"Created company: {company.company_name} (id: {company.id})")
        print(f"Company admin: {admin.username} / demo-admin-pass")

        ship = Ship(company_id=company.id, ship_name="MV Demo Star", imo_number="9000001")
        db.add(ship)
        await db.commit()
        await db.refresh(ship)
        print(f"Created ship: {ship.ship_name} (id: {ship.id})")

        company_admin = Principal.from_user(admin)
        for seafarer_id, name, rank, status in DEMO_CREW:
            user, issued = await accounts.create_account(
                db, company_admin,
                {"seafarer_id": seafarer_id, "full_name": name, "rank": rank,
                 "status": status, "ship_id": ship.id},
                engine,
            )
            login = f"{issued.username} / {issued.password}" if issued else "no login (not onboard)"
            print(f"  {name} ({rank}, {status}): {login}")

    print("\nSeed complete. Start the server with: uvicorn crewdesk.main:app")


if __name__ == "__main__":
    asyncio.run(seed())
