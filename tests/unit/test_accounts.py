import pytest
from sqlalchemy import select, text

from crewdesk.db import crud
from crewdesk.errors import Conflict, Forbidden, NotFound, ValidationFailed
from crewdesk.models import Certificate, Company, RetiredSeafarerId, Ship, User, UserShipHistory
from crewdesk.models.enums import Role
from crewdesk.services import accounts, company_bootstrap
from crewdesk.services.credentials import verify_password

from tests.factories import add_user, principal_for


async def test_create_onboard_account_issues_credentials(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    user, issued = await accounts.create_account(
        db, admin,
        {"seafarer_id": "NEW-1", "full_name": "Ana", "status": "Onboard", "ship_id": fleet["ship_a"].id},
        cred_engine,
    )
    assert issued is not None
    assert user.username == issued.username
    assert user.company_id == fleet["a"].id
    assert verify_password(issued.password, user.password_hash)
    assert cred_engine.recover(user.password_enc) == issued.password

    history = (await db.execute(select(UserShipHistory))).scalars().all()
    assert [(h.user_id, h.ship_id) for h in history] == [(user.id, fleet["ship_a"].id)]


async def test_create_offboard_account_has_no_credentials(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    user, issued = await accounts.create_account(
        db, admin, {"seafarer_id": "NEW-2", "full_name": "Ben", "status": "Offboard"}, cred_engine,
    )
    assert issued is None
    assert user.username is None and user.password_hash is None


async def test_subadmin_creates_on_own_ship_by_default(db, fleet, cred_engine):
    sub = principal_for(Role.SUBADMIN, fleet["a"], fleet["ship_a"])
    user, _ = await accounts.create_account(
        db, sub, {"seafarer_id": "NEW-3", "full_name": "Cy"}, cred_engine,
    )
    assert (user.company_id, user.ship_id) == (fleet["a"].id, fleet["ship_a"].id)


async def test_admin_cannot_create_in_other_company(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    with pytest.raises(Forbidden):
        await accounts.create_account(
            db, admin, {"seafarer_id": "NEW-4", "full_name": "Di", "ship_id": fleet["ship_b"].id}, cred_engine,
        )
    assert await crud.seafarer_id_in_use(db, "NEW-4") is False


async def test_admin_cannot_create_admin(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    with pytest.raises(Forbidden):
        await accounts.create_account(
            db, admin, {"seafarer_id": "NEW-5", "full_name": "Ed", "role_id": int(Role.ADMIN)}, cred_engine,
        )


async def test_ship_company_mismatch_is_rejected(db, fleet, cred_engine):
    with pytest.raises(ValidationFailed):
        await accounts.create_account(
            db, principal_for(Role.SUPERADMIN),
            {"seafarer_id": "NEW-6", "full_name": "Fay", "company_id": fleet["a"].id,
             "ship_id": fleet["ship_b"].id},
            cred_engine,
        )


async def test_duplicate_and_retired_seafarer_ids_conflict(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    user, _ = await accounts.create_account(db, admin, {"seafarer_id": "DUP", "full_name": "G"}, cred_engine)
    with pytest.raises(Conflict):
        await accounts.create_account(db, admin, {"seafarer_id": "DUP", "full_name": "H"}, cred_engine)

    await accounts.delete_account(db, admin, user.id)
    assert await db.get(RetiredSeafarerId, "DUP") is not None
    with pytest.raises(Conflict):
        await accounts.create_account(db, admin, {"seafarer_id": "DUP", "full_name": "I"}, cred_engine)


async def test_update_is_partial_and_tracks_ship_moves(db, fleet, cred_engine):
    a = fleet["a"]
    user = await add_user(db, "UP-1", a, fleet["ship_a"], rank="Cadet", email="up1@example.com")
    admin = principal_for(Role.ADMIN, a)

    await accounts.update_account(db, admin, user.id, {"ship_id": fleet["ship_a"].id}, cred_engine)
    updated, issued = await accounts.update_account(
        db, admin, user.id, {"ship_id": fleet["ship_a2"].id, "rank": None, "full_name": "Renamed"}, cred_engine,
    )
    assert issued is None
    assert updated.full_name == "Renamed"
    assert updated.rank == "Cadet"
    assert updated.email == "up1@example.com"
    assert updated.ship_id == fleet["ship_a2"].id

    rows = (await db.execute(select(UserShipHistory).order_by(UserShipHistory.id))).scalars().all()
    assert [r.ship_id for r in rows] == [fleet["ship_a2"].id]


async def test_update_closes_open_history_row(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    user, _ = await accounts.create_account(
        db, admin, {"seafarer_id": "UP-2", "full_name": "J", "ship_id": fleet["ship_a"].id}, cred_engine,
    )
    await accounts.update_account(db, admin, user.id, {"ship_id": fleet["ship_a2"].id}, cred_engine)

    rows = (await db.execute(select(UserShipHistory).order_by(UserShipHistory.id))).scalars().all()
    assert [r.ship_id for r in rows] == [fleet["ship_a"].id, fleet["ship_a2"].id]
    assert rows[0].disembarkation_date is not None
    assert rows[1].disembarkation_date is None


async def test_update_missing_account_is_not_found(db, fleet, cred_engine):
    with pytest.raises(NotFound):
        await accounts.update_account(db, principal_for(Role.ADMIN, fleet["a"]), 4242, {}, cred_engine)


async def test_update_other_company_account_is_forbidden(db, fleet, cred_engine):
    foreign = await add_user(db, "UP-3", fleet["b"], fleet["ship_b"])
    with pytest.raises(Forbidden):
        await accounts.update_account(
            db, principal_for(Role.ADMIN, fleet["a"]), foreign.id, {"full_name": "x"}, cred_engine,
        )


async def test_admin_cannot_move_account_to_other_company_ship(db, fleet, cred_engine):
    crew = await add_user(db, "MV-1", fleet["a"], fleet["ship_a"])
    with pytest.raises(Forbidden):
        await accounts.update_account(
            db, principal_for(Role.ADMIN, fleet["a"]), crew.id, {"ship_id": fleet["ship_b"].id}, cred_engine,
        )
    await db.refresh(crew)
    assert (crew.company_id, crew.ship_id) == (fleet["a"].id, fleet["ship_a"].id)


async def test_subadmin_cannot_move_account_to_other_ship(db, fleet, cred_engine):
    crew = await add_user(db, "MV-2", fleet["a"], fleet["ship_a"])
    with pytest.raises(Forbidden):
        await accounts.update_account(
            db, principal_for(Role.SUBADMIN, fleet["a"], fleet["ship_a"]), crew.id,
            {"ship_id": fleet["ship_a2"].id}, cred_engine,
        )


async def test_superadmin_move_takes_company_from_ship(db, fleet, cred_engine):
    crew = await add_user(db, "MV-3", fleet["a"], fleet["ship_a"])
    moved, _ = await accounts.update_account(
        db, principal_for(Role.SUPERADMIN), crew.id, {"ship_id": fleet["ship_b"].id}, cred_engine,
    )
    assert (moved.company_id, moved.ship_id) == (fleet["b"].id, fleet["ship_b"].id)


async def test_company_only_move_must_match_current_ship(db, fleet, cred_engine):
    crew = await add_user(db, "MV-4", fleet["a"], fleet["ship_a"])
    with pytest.raises(ValidationFailed):
        await accounts.update_account(
            db, principal_for(Role.SUPERADMIN), crew.id, {"company_id": fleet["b"].id}, cred_engine,
        )


async def test_delete_referenced_holder_conflicts(db, fleet):
    holder = await add_user(db, "DEL-1", fleet["a"], fleet["ship_a"])
    db.add(Certificate(user_id=holder.id, company_id=fleet["a"].id, certificate_name="STCW Basic"))
    await db.commit()
    await db.execute(text("PRAGMA foreign_keys=ON"))

    with pytest.raises(Conflict):
        await accounts.delete_account(db, principal_for(Role.ADMIN, fleet["a"]), holder.id)
    assert await crud.get_row(db, User, holder.id) is not None


async def test_cannot_delete_self(db, fleet):
    me = await add_user(db, "ME", fleet["a"], None, role=Role.ADMIN)
    with pytest.raises(ValidationFailed):
        await accounts.delete_account(db, principal_for(Role.ADMIN, fleet["a"], user_id=me.id), me.id)


async def test_signup_creates_pending_crew(db, fleet, cred_engine):
    user = await accounts.signup(
        db,
        {"seafarer_id": "SIGN-1", "full_name": "Kim", "username": "Kim.Sea", "password": "Long-enough-1",
         "ship_id": fleet["ship_a"].id},
        cred_engine,
    )
    assert user.status == "Pending"
    assert user.role_id == int(Role.CREW)
    assert user.username == "kim.sea"
    assert user.company_id == fleet["a"].id

    with pytest.raises(Conflict):
        await accounts.signup(
            db,
            {"seafarer_id": "SIGN-2", "full_name": "Kai", "username": "kim.sea", "password": "Long-enough-1",
             "company_id": fleet["a"].id},
            cred_engine,
        )


async def test_view_and_set_password(db, fleet, cred_engine):
    admin = principal_for(Role.ADMIN, fleet["a"])
    user, issued = await accounts.create_account(
        db, admin, {"seafarer_id": "PW-1", "full_name": "L", "status": "Onboard"}, cred_engine,
    )

    view = await accounts.view_password(db, admin, user.id, cred_engine)
    assert view == {"user_id": user.id, "username": issued.username, "password": issued.password}

    result = await accounts.set_password(db, admin, user.id, cred_engine)
    assert result["username"] == issued.username
    assert result["password"] != issued.password
    assert (await accounts.view_password(db, admin, user.id, cred_engine))["password"] == result["password"]


async def test_set_password_needs_existing_credentials(db, fleet, cred_engine):
    user = await add_user(db, "PW-2", fleet["a"], fleet["ship_a"], status="Offboard")
    with pytest.raises(ValidationFailed):
        await accounts.set_password(db, principal_for(Role.ADMIN, fleet["a"]), user.id, cred_engine, "Long-enough-1")


async def test_crew_cannot_view_passwords(db, fleet, cred_engine):
    user = await add_user(db, "PW-3", fleet["a"], fleet["ship_a"])
    crew = principal_for(Role.CREW, fleet["a"], fleet["ship_a"], user_id=user.id)
    with pytest.raises(Forbidden):
        await accounts.view_password(db, crew, user.id, cred_engine)


# ── Company bootstrap ────────────────────────────────────

async def test_company_create_adds_admin_account(db, cred_engine):
    company, admin = await company_bootstrap.create_company(
        db, principal_for(Role.SUPERADMIN), {"company_name": "Corvus", "email": "ops@corvus.example"},
        "Corvus", "Admin-pass-1", cred_engine,
    )
    assert admin.seafarer_id == f"COMPANY:{company.id}"
    assert admin.role_id == int(Role.ADMIN)
    assert admin.ship_id is None
    assert admin.status == "Onboard"
    assert admin.username == "corvus"
    assert admin.full_name == "Corvus Admin"
    assert cred_engine.recover(admin.password_enc) == "Admin-pass-1"


async def test_company_admin_username_made_unique(db, cred_engine):
    su = principal_for(Role.SUPERADMIN)
    await company_bootstrap.create_company(db, su, {"company_name": "One"}, "fleet", "Admin-pass-1", cred_engine)
    _, second = await company_bootstrap.create_company(
        db, su, {"company_name": "Two"}, "fleet", "Admin-pass-1", cred_engine,
    )
    assert second.username.startswith("fleet.")


async def test_only_superadmin_creates_companies(db, fleet, cred_engine):
    with pytest.raises(Forbidden):
        await company_bootstrap.create_company(
            db, principal_for(Role.ADMIN, fleet["a"]), {"company_name": "X"}, "x", "Admin-pass-1", cred_engine,
        )


async def test_company_update_syncs_admin(db, cred_engine):
    su = principal_for(Role.SUPERADMIN)
    company, admin = await company_bootstrap.create_company(
        db, su, {"company_name": "Delta"}, "delta", "Admin-pass-1", cred_engine,
    )
    admin_principal = principal_for(Role.ADMIN, company, user_id=admin.id)

    updated, new_username = await company_bootstrap.update_company(
        db, admin_principal, company.id, {"company_name": "Delta Shipping", "phone_no": None},
        cred_engine, admin_username="delta.ops", admin_password="Fresh-pass-22",
    )
    assert updated.company_name == "Delta Shipping"
    assert new_username == "delta.ops"
    await db.refresh(admin)
    assert admin.username == "delta.ops"
    assert admin.full_name == "Delta Shipping Admin"
    assert verify_password("Fresh-pass-22", admin.password_hash)


async def test_admin_cannot_update_other_company(db, fleet, cred_engine):
    with pytest.raises(Forbidden):
        await company_bootstrap.update_company(
            db, principal_for(Role.ADMIN, fleet["a"]), fleet["b"].id, {"company_name": "Mine now"}, cred_engine,
        )


async def test_company_delete_removes_admin(db, cred_engine):
    su = principal_for(Role.SUPERADMIN)
    company, admin = await company_bootstrap.create_company(
        db, su, {"company_name": "Echo"}, "echo", "Admin-pass-1", cred_engine,
    )
    admin_id = admin.id
    await company_bootstrap.delete_company(db, su, company.id)

    assert await db.get(Company, company.id) is None
    assert (await db.execute(select(User).where(User.id == admin_id))).scalars().first() is None


async def test_company_with_ships_is_not_deleted(db, fleet):
    with pytest.raises(Conflict):
        await company_bootstrap.delete_company(db, principal_for(Role.SUPERADMIN), fleet["a"].id)
    assert (await db.execute(select(Ship).where(Ship.company_id == fleet["a"].id))).scalars().first()
