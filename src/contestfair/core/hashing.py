"""Identity hashing helpers used for duplicate detection.

All digests are SHA-256 over a canonical JSON document (sorted keys, compact
separators), so the same normalized input yields the same hex string across
processes and hosts.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import re
import secrets
from typing import Any, Iterable, Mapping, TypeVar

from .errors import InvalidInputError

_NON_DIGITS = re.compile(r"\D")

RecordT = TypeVar("RecordT")


def _canonical_digest(payload: Mapping[str, Any]) -> str:
    try:
        document = json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"hash payload is not serializable: {exc}") from exc
    return hashlib.sha256(document.encode("utf-8")).hexdigest()


def normalize_email(email: str | None) -> str:
    """Lower-case and trim an email address, rejecting missing values."""
    if email is None:
        raise InvalidInputError("email is required")
    if not isinstance(email, str):
        raise InvalidInputError("email must be a string")
    normalized = email.strip().lower()
    if not normalized:
        raise InvalidInputError("email must not be empty")
    return normalized


def normalize_phone(phone: str | None) -> str:
    """Strip everything except digits from a phone number."""
    if not phone:
        return ""
    return _NON_DIGITS.sub("", str(phone))


def generate_identity_hash(
    email: str,
    phone: str | None,
    contest_id: str,
    extra: Mapping[str, Any] | None = None,
) -> str:
    """Return the uniqueness key of a registration.

    Parameters
    ----------
    email : str
        Participant email; trimmed and lower-cased before hashing.
    phone : str | None
        Phone number; only its digits are hashed.
    contest_id : str
        Contest the registration belongs to.
    extra : Mapping[str, Any] | None, default: None
        Additional fields merged into the hashed document.

    Raises
    ------
    InvalidInputError
        If ``email`` or ``contest_id`` is missing.
    """
    if contest_id is None or str(contest_id).strip() == "":
        raise InvalidInputError("contest_id is required")
    payload: dict[str, Any] = {
        "email": normalize_email(email),
        "phone": normalize_phone(phone),
        "contestId": str(contest_id),
    }
    if extra:
        payload.update(extra)
    return _canonical_digest(payload)


def generate_device_fingerprint(
    ip_address: str | None,
    user_agent: str | None,
    extra: Mapping[str, Any] | None = None,
) -> str:
    """Return a fingerprint of the device a registration came from."""
    payload: dict[str, Any] = {
        "ip": ip_address or "",
        "ua": user_agent or "",
    }
    if extra:
        payload.update(extra)
    return _canonical_digest(payload)


def generate_random_seed(contest_id: str, timestamp: Any) -> str:
    """Derive a publishable draw seed from a contest id and a timestamp."""
    if contest_id is None or str(contest_id).strip() == "":
        raise InvalidInputError("contest_id is required")
    return hashlib.sha256(f"{contest_id}-{timestamp}".encode("utf-8")).hexdigest()


def generate_contest_seed() -> str:
    """Return a fresh random seed suitable for ``Contest.random_seed``."""
    return secrets.token_hex(16)


def generate_verification_token() -> str:
    return secrets.token_hex(32)


def compare_hashes_constant_time(left: str, right: str) -> bool:
    """Compare two hex digests without leaking the mismatch position.

    Inputs of different length return ``False`` immediately; only equal
    length inputs are compared in constant time.
    """
    if len(left) != len(right):
        return False
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def build_hash_index(records: Iterable[RecordT]) -> dict[str, RecordT]:
    """Index records by ``unique_hash`` for O(1) duplicate lookups.

    Records without a hash are skipped; later records win on collisions.
    """
    index: dict[str, RecordT] = {}
    for record in records:
        unique_hash = getattr(record, "unique_hash", None)
        if unique_hash:
            index[unique_hash] = record
    return index


__all__ = [
    "build_hash_index",
    "compare_hashes_constant_time",
    "generate_contest_seed",
    "generate_device_fingerprint",
    "generate_identity_hash",
    "generate_random_seed",
    "generate_verification_token",
    "normalize_email",
    "normalize_phone",
]
