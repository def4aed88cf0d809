from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from crewdesk.models import User
from crewdesk.schemas import (
    AssessmentUpdate, BulkStatusRequest, CompanyCreate, UserCreate, UserRead, UserUpdate,
)


def test_user_read_never_exposes_secrets():
    user = User(
        id=1, seafarer_id="SF1", full_name="A", role_id=4, username="sf1.abc123",
        password_hash="$2b$12$hash", password_enc="iv.tag.ct", reset_token_hash="f" * 64,
        created_at=datetime.now(timezone.utc),
    )
    data = UserRead.model_validate(user).model_dump()
    assert data["username"] == "sf1.abc123"
    assert not {"password_hash", "password_enc", "reset_token_hash", "reset_token_expires_at"} & set(data)


def test_user_create_defaults_to_crew():
    assert UserCreate(seafarer_id="SF2", full_name="B").role_id == 4


@pytest.mark.parametrize("role_id", [0, 5])
def test_user_create_rejects_unknown_roles(role_id):
    with pytest.raises(ValidationError):
        UserCreate(seafarer_id="SF3", full_name="C", role_id=role_id)


def test_user_update_omitted_fields_are_none():
    update = UserUpdate(status="Onboard")
    dumped = update.model_dump(exclude={"remove_credentials"})
    assert dumped["status"] == "Onboard"
    assert dumped["full_name"] is None
    assert update.remove_credentials is False


def test_company_create_requires_admin_login():
    with pytest.raises(ValidationError):
        CompanyCreate(company_name="X")
    assert CompanyCreate(company_name="X", username="x", password="y").username == "x"


def test_bulk_request_requires_ids():
    with pytest.raises(ValidationError):
        BulkStatusRequest(user_ids=[], status="Onboard")


def test_assessment_update_distinguishes_missing_questions():
    assert AssessmentUpdate(title="t").questions is None
    assert AssessmentUpdate(questions=[]).questions == []
