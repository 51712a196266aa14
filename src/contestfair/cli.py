"""Typer CLI entrypoint for contest winner selection."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core import FairnessError, InvalidInputError, generate_identity_hash
from .logging import configure_logging
from .pipeline import AuditLogger, ContestLoadError, SelectionPipeline
from .schemas.config import load_config

app = typer.Typer(help="Contest winner selection and fairness auditing CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_hint="config")
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_pipeline(settings: dict[str, Any]) -> SelectionPipeline:
    # Strategy, eligibility and fallback options are only checked here.
    try:
        return create_container(settings=settings).pipeline()
    except (TypeError, ValueError, FairnessError) as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


@app.command()
def select(
    contest: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Contest JSON path."),
    participants: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Participants JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    algorithm: Optional[str] = typer.Option(None, help="Override the contest's fairness algorithm."),
    count: Optional[int] = typer.Option(None, min=1, help="Override the contest's number of winners."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Select winners for a contest."""
    settings = _load_settings(config)
    configure_logging(log_level)

    pipeline = _build_pipeline(settings)
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        result = pipeline.select(
            contest_path=contest,
            participants_path=participants,
            output_path=output,
            algorithm=algorithm,
            count=count,
            audit_logger=audit_logger,
        )
    except ContestLoadError as exc:
        raise typer.BadParameter(str(exc), param_hint="contest") from exc
    except FairnessError as exc:
        typer.echo(f"Selection failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    report = result["report"]
    typer.echo(
        f"Selected {report['total_winners']} of {report['total_participants']} eligible "
        f"participants with {result['metadata']['algorithm']} "
        f"(fairness score {report['fairness_score']}). Results saved to {output}."
    )


@app.command()
def qualify(
    participants: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Participants JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    count: Optional[int] = typer.Option(None, min=1, help="Maximum number of participants to qualify."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Promote the strongest registrations to the Qualified stage."""
    settings = _load_settings(config)
    configure_logging(log_level)

    pipeline = _build_pipeline(settings)
    audit_logger = AuditLogger(audit_log) if audit_log else None
    result = pipeline.qualify(
        participants_path=participants,
        output_path=output,
        count=count,
        audit_logger=audit_logger,
    )
    typer.echo(f"Qualified {result['metadata']['qualified_count']} participants. Results saved to {output}.")


@app.command()
def score(
    participants: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Participants JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    contest_id: Optional[str] = typer.Option(None, help="Contest identifier used to hash records without uniqueHash."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Recompute duplicate flags and fraud scores for a registration snapshot."""
    configure_logging(log_level)

    pipeline = _build_pipeline({})
    audit_logger = AuditLogger(audit_log) if audit_log else None
    result = pipeline.score(
        participants_path=participants,
        output_path=output,
        contest_id=contest_id,
        audit_logger=audit_logger,
    )
    metadata = result["metadata"]
    typer.echo(
        f"Scored {metadata['participant_count']} participants: "
        f"{len(metadata['duplicate_ids'])} duplicates, {len(metadata['suspicious_ids'])} suspicious. "
        f"Results saved to {output}."
    )


@app.command("identity-hash")
def identity_hash(
    email: str = typer.Option(..., help="Participant email."),
    contest_id: str = typer.Option(..., help="Contest identifier."),
    phone: Optional[str] = typer.Option(None, help="Participant phone number."),
) -> None:
    """Print the duplicate-detection key of a registration."""
    try:
        typer.echo(generate_identity_hash(email, phone, contest_id))
    except InvalidInputError as exc:
        raise typer.BadParameter(str(exc)) from exc


def main() -> None:
    app()


if __name__ == "__main__":
    main()
