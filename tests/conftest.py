import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from crewdesk.models import Base, Company, Ship
from crewdesk.services.credentials import CredentialEngine
from crewdesk.services.encryption import PasswordCipher

from tests.factories import TEST_KEY


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def cred_engine():
    return CredentialEngine(PasswordCipher(TEST_KEY))


@pytest_asyncio.fixture
async def fleet(db):
    """Two companies; A has two ships, B has one."""
    a = Company(company_name="Atlas Marine")
    b = Company(company_name="Boreal Lines")
    db.add_all([a, b])
    await db.flush()
    ship_a = Ship(company_id=a.id, ship_name="MV Atlas One")
    ship_a2 = Ship(company_id=a.id, ship_name="MV Atlas Two")
    ship_b = Ship(company_id=b.id, ship_name="MV Boreal")
    db.add_all([ship_a, ship_a2, ship_b])
    await db.commit()
    return {"a": a, "b": b, "ship_a": ship_a, "ship_a2": ship_a2, "ship_b": ship_b}
