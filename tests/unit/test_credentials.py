import re

import pytest

from crewdesk.errors import UsernameGenerationExhausted, ValidationFailed
from crewdesk.services.credentials import (
    MAX_USERNAME_TRIES, PASSWORD_ALPHABET, generate_password, generate_username,
    hash_password, make_unique_username, verify_password,
)


def test_hash_and_verify():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_without_hash_is_false():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_generated_password_uses_alphabet():
    pw = generate_password(24)
    assert len(pw) == 24
    assert set(pw) <= set(PASSWORD_ALPHABET)


def test_generated_passwords_differ():
    assert generate_password() != generate_password()


async def test_username_from_seafarer_id():
    async def never_taken(_):
        return False

    name = await generate_username("SF-12/34 B", never_taken)
    assert re.fullmatch(r"sf1234b\.[0-9a-f]{6}", name)


async def test_username_retries_on_collision():
    seen = []

    async def taken_twice(candidate):
        seen.append(candidate)
        return len(seen) <= 2

    name = await generate_username("A1", taken_twice)
    assert len(seen) == 3
    assert name == seen[-1]


async def test_username_exhaustion_raises():
    calls = []

    async def always_taken(candidate):
        calls.append(candidate)
        return True

    with pytest.raises(UsernameGenerationExhausted):
        await generate_username("A1", always_taken)
    assert len(calls) == MAX_USERNAME_TRIES


async def test_contending_generations_get_distinct_names():
    committed = set()

    async def taken(candidate):
        return candidate in committed

    first = await generate_username("SEED", taken)
    committed.add(first)
    second = await generate_username("SEED", taken)
    assert first != second


async def test_unique_username_keeps_free_name():
    async def never_taken(_):
        return False

    assert await make_unique_username("  Atlas.Admin ", never_taken) == "atlas.admin"


async def test_unique_username_adds_suffix_when_taken():
    async def base_taken(candidate):
        return candidate == "atlas"

    name = await make_unique_username("atlas", base_taken)
    assert re.fullmatch(r"atlas\.[0-9a-f]{4}", name)


async def test_unique_username_rejects_empty():
    async def never_taken(_):
        return False

    with pytest.raises(ValidationFailed):
        await make_unique_username("!!!", never_taken)


async def test_issue_seals_one_plaintext(cred_engine):
    async def never_taken(_):
        return False

    issued = await cred_engine.issue("SF100", never_taken)
    assert verify_password(issued.password, issued.password_hash)
    assert cred_engine.recover(issued.password_enc) == issued.password
    assert issued.public() == {"username": issued.username, "password": issued.password}
