from __future__ import annotations

from datetime import datetime, timedelta, timezone

from contestfair.core import assess_fraud, calculate_fraud_score
from contestfair.schemas import RegistrationRecord

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def record(**kwargs) -> RegistrationRecord:
    return RegistrationRecord(**kwargs)


def test_shared_email_and_device_add_up():
    existing = [
        record(id="1", email="test@example.com", device_fingerprint="abc123", ip_address="192.168.1.1"),
        record(id="2", email="test@example.com", device_fingerprint="abc123", ip_address="192.168.1.1"),
        record(id="3", email="other@example.com", device_fingerprint="abc123", ip_address="192.168.1.1"),
    ]
    candidate = record(email="test@example.com", device_fingerprint="abc123", ip_address="192.168.1.1")

    assessment = assess_fraud(candidate, existing)

    assert assessment.score == 70
    assert assessment.signals == ["shared_email", "shared_device"]
    assert not assessment.is_suspicious


def test_clean_registration_scores_zero():
    existing = [record(id="1", email="test@example.com", device_fingerprint="abc123", ip_address="192.168.1.1")]
    candidate = record(email="unique@example.com", device_fingerprint="xyz789", ip_address="10.0.0.1")

    assert calculate_fraud_score(candidate, existing) == 0


def test_email_alone_scores_forty_below_device_and_ip_thresholds():
    existing = [
        record(id=str(i), email="dup@example.com" if i == 0 else f"u{i}@example.com",
               device_fingerprint="dev", ip_address="1.1.1.1")
        for i in range(2)
    ]
    candidate = record(id="new", email="DUP@example.com ", device_fingerprint="dev", ip_address="1.1.1.1")

    assert calculate_fraud_score(candidate, existing) == 40


def test_candidate_is_not_compared_with_itself():
    candidate = record(id="p1", email="self@example.com", device_fingerprint="d", ip_address="1.1.1.1")

    assert calculate_fraud_score(candidate, [candidate]) == 0


def test_shared_ip_needs_more_than_five_others():
    candidate = record(id="c", email="c@example.com", ip_address="10.0.0.9")
    five = [record(id=str(i), email=f"{i}@example.com", ip_address="10.0.0.9") for i in range(5)]
    six = five + [record(id="5", email="5@example.com", ip_address="10.0.0.9")]

    assert calculate_fraud_score(candidate, five) == 0
    assert calculate_fraud_score(candidate, six) == 20


def test_registration_burst_needs_more_than_ten_nearby():
    candidate = record(id="c", email="c@example.com", registration_date=BASE_TIME)
    nearby = [
        record(id=str(i), email=f"{i}@example.com", registration_date=BASE_TIME + timedelta(seconds=i * 3))
        for i in range(10)
    ]
    far = [record(id="far", email="far@example.com", registration_date=BASE_TIME + timedelta(minutes=5))]

    assert calculate_fraud_score(candidate, nearby + far) == 0

    burst = nearby + [record(id="extra", email="x@example.com", registration_date=BASE_TIME - timedelta(seconds=59))]
    assert calculate_fraud_score(candidate, burst) == 10


def test_all_signals_cap_at_one_hundred():
    candidate = record(
        id="c",
        email="c@example.com",
        device_fingerprint="dev",
        ip_address="10.0.0.9",
        registration_date=BASE_TIME,
    )
    population = [
        record(
            id=str(i),
            email="c@example.com",
            device_fingerprint="dev",
            ip_address="10.0.0.9",
            registration_date=BASE_TIME + timedelta(seconds=i),
        )
        for i in range(12)
    ]

    assessment = assess_fraud(candidate, population)

    assert assessment.score == 100
    assert assessment.is_suspicious
    assert set(assessment.signals) == {"shared_email", "shared_device", "shared_ip", "registration_burst"}
