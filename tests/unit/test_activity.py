from datetime import datetime, timezone

import pytest

from crewdesk.errors import Unauthorized, ValidationFailed
from crewdesk.models import ActivityLog
from crewdesk.models.enums import Role
from crewdesk.services import activity

from tests.factories import add_user, principal_for


def test_parse_tracker_timestamp():
    assert activity.parse_tracker_timestamp("2025-12-24-09:28") == datetime(
        2025, 12, 24, 9, 28, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("raw", [None, "", "2025-12-24 09:28", "2025-13-40-99:99", "yesterday"])
def test_unparseable_timestamps(raw):
    assert activity.parse_tracker_timestamp(raw) is None


def test_activity_key_check():
    activity.check_activity_key("", None)
    activity.check_activity_key("k3y", "k3y")
    with pytest.raises(Unauthorized):
        activity.check_activity_key("k3y", "nope")
    with pytest.raises(Unauthorized):
        activity.check_activity_key("k3y", None)


@pytest.mark.parametrize("limit, expected", [(None, 100), (0, 100), (-5, 100), (20, 20), (10_000, 500)])
def test_clamp_limit(limit, expected):
    assert activity.clamp_limit(limit, 100, 500) == expected


async def test_track_resolves_known_username(db, fleet):
    user = await add_user(db, "ACT-1", fleet["a"], fleet["ship_a"], username="act1")
    log = await activity.track_activity(
        db, {"username": "act1", "trainingType": "Firefighting", "timestamp": "2025-12-24-09:28", "score": 9},
    )
    assert (log.user_id, log.company_id, log.ship_id) == (user.id, fleet["a"].id, fleet["ship_a"].id)
    assert log.activity_type == "training"
    assert log.training_type == "Firefighting"
    assert log.payload_json["score"] == 9


async def test_track_unknown_username_uses_clock(db):
    now = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    log = await activity.track_activity(
        db, {"username": "ghost", "activityType": "login", "timestamp": "bad"}, clock=lambda: now,
    )
    assert log.user_id is None
    assert log.activity_type == "login"
    assert log.occurred_at.replace(tzinfo=timezone.utc) == now


async def test_track_requires_username(db):
    with pytest.raises(ValidationFailed):
        await activity.track_activity(db, {"trainingType": "x"})


async def test_list_is_scoped_and_filters_are_superadmin_only(db, fleet):
    a, b = fleet["a"], fleet["b"]
    db.add_all([
        ActivityLog(username="a1", company_id=a.id, ship_id=fleet["ship_a"].id),
        ActivityLog(username="a2", company_id=a.id, ship_id=fleet["ship_a2"].id),
        ActivityLog(username="b1", company_id=b.id, ship_id=fleet["ship_b"].id),
        ActivityLog(username="ghost"),
    ])
    await db.commit()

    everything = await activity.list_activity(db, principal_for(Role.SUPERADMIN), limit=100)
    assert len(everything) == 4
    filtered = await activity.list_activity(db, principal_for(Role.SUPERADMIN), limit=100, company_id=b.id)
    assert [log.username for log in filtered] == ["b1"]

    admin_a = principal_for(Role.ADMIN, a)
    ignored = await activity.list_activity(db, admin_a, limit=100, company_id=b.id)
    assert {log.username for log in ignored} == {"a1", "a2"}

    crew = principal_for(Role.CREW, a, fleet["ship_a"])
    assert [log.username for log in await activity.list_activity(db, crew, limit=100)] == ["a1"]
    assert len(await activity.list_activity(db, principal_for(Role.SUPERADMIN), limit=2)) == 2
