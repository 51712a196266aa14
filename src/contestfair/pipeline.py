"""File-driven orchestration around the selection engine."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import pendulum
import structlog
from pydantic import BaseModel, ValidationError

from . import __version__
from .core import FairnessEngine, FairnessError, SelectionResult
from .core.fraud import SUSPICIOUS_THRESHOLD
from .schemas import Contest, ContestStatus, Participant, ParticipantStage
from .workflow import (
    EligibilityPolicy,
    rank_for_qualification,
    score_registrations,
    transition_stage,
)


class ParticipantLoadError(ValueError):
    """Raised when participant loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Participant]):
        super().__init__("Participant loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Participant loading failed: {self.errors}"


class ContestLoadError(ValueError):
    """Raised when a contest document is not valid JSON or fails validation."""


class SelectionAlreadyCompletedError(FairnessError):
    """Raised when winners were already chosen for a contest."""


class ParticipantLoader:
    """Load participant snapshots from JSON lines."""

    def load(self, path: Path) -> list[Participant]:
        participants: list[Participant] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                try:
                    participants.append(Participant.model_validate(record))
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc}")
        if errors:
            raise ParticipantLoadError(errors, participants)
        return participants


class ContestLoader:
    """Load a contest document."""

    def load(self, path: Path) -> Contest:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ContestLoadError(f"Invalid contest JSON: {exc}") from exc
        try:
            return Contest.model_validate(data)
        except ValidationError as exc:
            raise ContestLoadError(f"Invalid contest document: {exc}") from exc


class OutputWriter:
    """Persist selection payloads."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


def _already_completed(contest_id: str) -> SelectionAlreadyCompletedError:
    return SelectionAlreadyCompletedError(
        f"Winners were already selected for contest {contest_id!r}"
    )


class SelectionLedger:
    """Process-wide guard allowing one completed selection per contest.

    ``claim`` serializes concurrent attempts for the same contest, so two
    callers can never both observe "not completed" and both pick winners.
    Per-contest locks are released once a contest completes, and completed
    contests never get a new one. Contests whose selection never completes
    (empty pools) keep their lock for the life of the ledger.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._completed: set[str] = set()

    def _lock_for(self, contest_id: str) -> threading.Lock:
        with self._guard:
            if contest_id in self._completed:
                raise _already_completed(contest_id)
            return self._locks.setdefault(contest_id, threading.Lock())

    @contextmanager
    def claim(self, contest_id: str) -> Iterator[None]:
        with self._lock_for(contest_id):
            if self.is_completed(contest_id):
                raise _already_completed(contest_id)
            yield

    def mark_completed(self, contest_id: str) -> None:
        with self._guard:
            self._completed.add(contest_id)
            # Waiters on the old lock still see the completed id.
            self._locks.pop(contest_id, None)

    def is_completed(self, contest_id: str) -> bool:
        with self._guard:
            return contest_id in self._completed

    def pending_count(self) -> int:
        """Number of contests holding a lock without a completed selection."""
        with self._guard:
            return len(self._locks)


class SelectionPipeline:
    """End-to-end winner selection and qualification orchestrator."""

    def __init__(
        self,
        *,
        engine: FairnessEngine,
        eligibility: EligibilityPolicy | None = None,
        ledger: SelectionLedger | None = None,
        participant_loader: ParticipantLoader | None = None,
        contest_loader: ContestLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._eligibility = eligibility or EligibilityPolicy()
        self._ledger = ledger or SelectionLedger()
        self._participants = participant_loader or ParticipantLoader()
        self._contests = contest_loader or ContestLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def select(
        self,
        *,
        contest_path: Path,
        participants_path: Path,
        output_path: Path,
        algorithm: str | None = None,
        count: int | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        contest = self._contests.load(contest_path)
        participants, load_errors = self._load_participants(participants_path)

        result = self.select_winners(
            contest,
            participants,
            algorithm=algorithm,
            count=count,
        )
        transitions = {winner_id: ParticipantStage.WINNER.value for winner_id in result.winner_ids}
        contest_status = ContestStatus.COMPLETED if result.winners else contest.status

        payload = {
            "metadata": {
                "contest_id": contest.contest_id,
                "algorithm": result.algorithm,
                "participant_count": len(participants),
                "eligible_count": result.report.total_participants,
                "errors": load_errors,
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
                "app_version": __version__,
            },
            "contest_status": contest_status.value,
            "winners": [
                transition_stage(winner, ParticipantStage.WINNER).model_dump(mode="json")
                for winner in result.winners
            ],
            "stage_transitions": transitions,
            "report": asdict(result.report),
        }
        serialized = json.loads(json.dumps(payload, default=_json_default, ensure_ascii=False))

        if audit_logger:
            audit_logger.append(
                {
                    "event": "winners_selected",
                    "contest_id": contest.contest_id,
                    "algorithm": result.algorithm,
                    "winner_ids": result.winner_ids,
                    "fairness_score": result.report.fairness_score,
                    "random_seed": contest.random_seed,
                    "timestamp": serialized["report"]["timestamp"],
                }
            )

        self._writer.write(output_path, serialized)
        return serialized

    def select_winners(
        self,
        contest: Contest,
        participants: list[Participant],
        *,
        algorithm: str | None = None,
        count: int | None = None,
    ) -> SelectionResult:
        """Filter the eligible pool and run the engine once for ``contest``.

        Raises
        ------
        SelectionAlreadyCompletedError
            If the contest is already completed, in its document or in this
            process.
        """
        if contest.status is ContestStatus.COMPLETED:
            raise SelectionAlreadyCompletedError(
                f"Contest {contest.contest_id!r} is already completed"
            )

        with self._ledger.claim(contest.contest_id):
            eligible = self._eligibility.filter(participants)
            if not eligible:
                self._logger.warning(
                    "selection.empty_pool",
                    contest_id=contest.contest_id,
                    participant_count=len(participants),
                )
            result = self._engine.select_winners(
                contest,
                eligible,
                algorithm=algorithm,
                count=count,
            )
            if result.winners:
                self._ledger.mark_completed(contest.contest_id)
        return result

    def qualify(
        self,
        *,
        participants_path: Path,
        output_path: Path,
        count: int | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        participants, load_errors = self._load_participants(participants_path)
        qualified = self.qualify_participants(participants, count=count)

        payload = {
            "metadata": {
                "participant_count": len(participants),
                "qualified_count": len(qualified),
                "errors": load_errors,
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
                "app_version": __version__,
            },
            "qualified": [participant.model_dump(mode="json") for participant in qualified],
            "stage_transitions": {
                participant.id: ParticipantStage.QUALIFIED.value for participant in qualified
            },
        }

        if audit_logger:
            audit_logger.append(
                {
                    "event": "participants_qualified",
                    "participant_ids": [participant.id for participant in qualified],
                    "timestamp": payload["metadata"]["timestamp"],
                }
            )

        self._writer.write(output_path, payload)
        return payload

    def qualify_participants(
        self,
        participants: list[Participant],
        *,
        count: int | None = None,
    ) -> list[Participant]:
        """Promote the strongest registrations to ``Qualified``.

        Candidates are registered, non-duplicate records below the fraud
        threshold, ranked by ``priority + engagement_score``.
        """
        policy = EligibilityPolicy(
            stages=(ParticipantStage.REGISTERED,),
            exclude_duplicates=True,
            max_fraud_score=self._eligibility.max_fraud_score,
        )
        ranked = rank_for_qualification(policy.filter(participants), count)
        qualified = [transition_stage(p, ParticipantStage.QUALIFIED) for p in ranked]
        self._logger.info(
            "qualification.completed",
            participant_count=len(participants),
            qualified=len(qualified),
        )
        return qualified

    def score(
        self,
        *,
        participants_path: Path,
        output_path: Path,
        contest_id: str | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        """Recompute duplicate flags and fraud scores for a JSONL snapshot."""
        participants, load_errors = self._load_participants(participants_path)
        scored = score_registrations(participants, contest_id)
        duplicates = [p.id for p in scored if p.is_duplicate]
        suspicious = [p.id for p in scored if p.fraud_score > SUSPICIOUS_THRESHOLD]
        self._logger.info(
            "scoring.completed",
            participant_count=len(scored),
            duplicates=len(duplicates),
            suspicious=len(suspicious),
        )

        payload = {
            "metadata": {
                "contest_id": contest_id,
                "participant_count": len(scored),
                "duplicate_ids": duplicates,
                "suspicious_ids": suspicious,
                "errors": load_errors,
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
                "app_version": __version__,
            },
            "participants": [participant.model_dump(mode="json") for participant in scored],
        }

        if audit_logger:
            audit_logger.append(
                {
                    "event": "registrations_scored",
                    "contest_id": contest_id,
                    "duplicate_ids": duplicates,
                    "suspicious_ids": suspicious,
                    "timestamp": payload["metadata"]["timestamp"],
                }
            )

        self._writer.write(output_path, payload)
        return payload

    def _load_participants(self, path: Path) -> tuple[list[Participant], list[str]]:
        try:
            return self._participants.load(path), []
        except ParticipantLoadError as exc:
            self._logger.warning("participants.partial_load", errors=exc.errors)
            return exc.partial, list(exc.errors)


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
