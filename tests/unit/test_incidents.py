import pytest

from crewdesk.api.incidents import update_incident
from crewdesk.errors import Forbidden, ValidationFailed
from crewdesk.models import Incident
from crewdesk.models.enums import Role
from crewdesk.schemas import IncidentUpdate

from tests.factories import principal_for


async def _report(db, fleet):
    incident = Incident(
        ship_id=fleet["ship_a"].id, company_id=fleet["a"].id, title="Loose railing",
    )
    db.add(incident)
    await db.commit()
    await db.refresh(incident)
    return incident


async def test_admin_cannot_move_incident_to_other_company_ship(db, fleet):
    incident = await _report(db, fleet)
    admin_a = principal_for(Role.ADMIN, fleet["a"])

    with pytest.raises(Forbidden):
        await update_incident(
            incident_id=incident.id, body=IncidentUpdate(ship_id=fleet["ship_b"].id),
            principal=admin_a, db=db,
        )

    await db.refresh(incident)
    assert (incident.company_id, incident.ship_id) == (fleet["a"].id, fleet["ship_a"].id)


async def test_admin_moves_incident_within_own_company(db, fleet):
    incident = await _report(db, fleet)
    moved = await update_incident(
        incident_id=incident.id, body=IncidentUpdate(ship_id=fleet["ship_a2"].id, severity="High"),
        principal=principal_for(Role.ADMIN, fleet["a"]), db=db,
    )
    assert (moved.company_id, moved.ship_id) == (fleet["a"].id, fleet["ship_a2"].id)
    assert moved.title == "Loose railing"
    assert moved.severity == "High"


async def test_superadmin_move_takes_company_from_ship(db, fleet):
    incident = await _report(db, fleet)
    moved = await update_incident(
        incident_id=incident.id, body=IncidentUpdate(ship_id=fleet["ship_b"].id),
        principal=principal_for(Role.SUPERADMIN), db=db,
    )
    assert (moved.company_id, moved.ship_id) == (fleet["b"].id, fleet["ship_b"].id)


async def test_company_change_without_ship_is_rejected(db, fleet):
    incident = await _report(db, fleet)
    with pytest.raises(ValidationFailed):
        await update_incident(
            incident_id=incident.id, body=IncidentUpdate(company_id=fleet["b"].id),
            principal=principal_for(Role.SUPERADMIN), db=db,
        )


async def test_admin_company_change_is_forbidden(db, fleet):
    incident = await _report(db, fleet)
    with pytest.raises(Forbidden):
        await update_incident(
            incident_id=incident.id, body=IncidentUpdate(company_id=fleet["b"].id),
            principal=principal_for(Role.ADMIN, fleet["a"]), db=db,
        )
