"""Row builders shared by the unit and integration tests."""

import base64

from crewdesk.models import User
from crewdesk.models.enums import Role
from crewdesk.services.principal import Principal

TEST_KEY = base64.b64encode(bytes(range(32))).decode("ascii")
TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests-only-32b"


def principal_for(role, company=None, ship=None, user_id=999):
    return Principal(
        user_id=user_id,
        role=role,
        company_id=company.id if company is not None else None,
        ship_id=ship.id if ship is not None else None,
    )


async def add_user(db, seafarer_id, company=None, ship=None, role=Role.CREW, status=None, **kw):
    user = User(
        seafarer_id=seafarer_id,
        full_name=kw.pop("full_name", f"Seafarer {seafarer_id}"),
        role_id=int(role),
        company_id=company.id if company is not None else None,
        ship_id=ship.id if ship is not None else None,
        status=status,
        **kw,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
