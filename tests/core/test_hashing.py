from __future__ import annotations

from dataclasses import dataclass

import pytest

from contestfair.core import InvalidInputError
from contestfair.core.hashing import (
    build_hash_index,
    compare_hashes_constant_time,
    generate_contest_seed,
    generate_device_fingerprint,
    generate_identity_hash,
    generate_random_seed,
    generate_verification_token,
)

CONTEST_ID = "507f1f77bcf86cd799439011"


def test_identity_hash_matches_canonical_sha256():
    digest = generate_identity_hash("test@example.com", "+1234567890", CONTEST_ID)

    assert digest == "46e5d70340d15218779968daa8fac29d5446d318ad1672609e9428584669cd00"


def test_identity_hash_normalizes_email_and_phone():
    first = generate_identity_hash("  Test@Example.COM ", "+1 (234) 567-890", CONTEST_ID)
    second = generate_identity_hash("test@example.com", "1234567890", CONTEST_ID)

    assert first == second
    assert len(first) == 64


@pytest.mark.parametrize(
    "email, phone, contest_id",
    [
        ("tost@example.com", "1234567890", CONTEST_ID),
        ("test@example.com", "1234567891", CONTEST_ID),
        ("test@example.com", "1234567890", CONTEST_ID[:-1] + "2"),
    ],
)
def test_identity_hash_changes_with_any_input(email, phone, contest_id):
    baseline = generate_identity_hash("test@example.com", "1234567890", CONTEST_ID)

    assert generate_identity_hash(email, phone, contest_id) != baseline


def test_identity_hash_includes_extra_fields():
    baseline = generate_identity_hash("test@example.com", None, CONTEST_ID)
    extended = generate_identity_hash("test@example.com", None, CONTEST_ID, {"handle": "@t"})

    assert baseline != extended


@pytest.mark.parametrize("email", [None, "", "   "])
def test_identity_hash_requires_email(email):
    with pytest.raises(InvalidInputError):
        generate_identity_hash(email, "123", CONTEST_ID)  # type: ignore[arg-type]


def test_identity_hash_requires_contest_id():
    with pytest.raises(ValueError):
        generate_identity_hash("test@example.com", "123", "")


def test_device_fingerprint_is_stable_and_sensitive():
    fingerprint = generate_device_fingerprint("10.0.0.1", "Mozilla/5.0")

    assert fingerprint == "13f66da719ab813174befa18450be7dd034243076651268ea2d06db810129de5"
    assert generate_device_fingerprint("10.0.0.1", "Mozilla/5.1") != fingerprint
    assert generate_device_fingerprint("10.0.0.1", "Mozilla/5.0", {"screen": "1080p"}) != fingerprint


def test_compare_hashes_constant_time():
    digest = generate_identity_hash("test@example.com", None, CONTEST_ID)

    assert compare_hashes_constant_time(digest, str(digest))
    assert not compare_hashes_constant_time(digest, digest[:-1] + ("0" if digest[-1] != "0" else "1"))
    assert not compare_hashes_constant_time(digest, digest[:-1])


def test_random_seed_helpers():
    assert generate_random_seed("c-1", "2025-01-01T00:00:00Z") == (
        "40c79559698f64f29fb3a0c6cb312416433fc4464bb0e993b8fd091043b9451f"
    )
    assert len(generate_contest_seed()) == 32
    assert generate_contest_seed() != generate_contest_seed()
    token = generate_verification_token()
    assert len(token) == 64
    int(token, 16)


@dataclass
class HashedRecord:
    name: str
    unique_hash: str | None


def test_build_hash_index_skips_unhashed_records():
    records = [
        HashedRecord("a", "h1"),
        HashedRecord("b", None),
        HashedRecord("c", "h2"),
    ]

    index = build_hash_index(records)

    assert set(index) == {"h1", "h2"}
    assert index["h2"].name == "c"
