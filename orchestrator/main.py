"""Command line entry point for validating and editing the record files."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

if __package__ is None or __package__ == "":  # pragma: no cover - runtime safety for script execution
    sys.path.append(str(Path(__file__).resolve().parent.parent))

from caredata import Treatment
from orchestrator import config
from orchestrator.integrity_report import create_integrity_report, summarize
from services.editing import RecordPaths, TreatmentWorkflow
from services.treatments import format_discharged_at, parse_discharged_at

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_APPLIED = 1
EXIT_LOAD_FAILED = 2


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")


class ChangeJournal:
    """Persists treatment change events into a JSON log."""

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path
        self._lock = threading.Lock()
        self._log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(
        self,
        command: str,
        status: str,
        *,
        start_time: Optional[datetime] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, object]] = None,
    ) -> None:
        completed_at = _utc_now()
        started_at = start_time or completed_at
        entry: Dict[str, object] = {
            "command": command,
            "status": status,
            "started_at": _format_timestamp(started_at),
            "completed_at": _format_timestamp(completed_at),
        }
        if message:
            entry["message"] = message
        if details is not None:
            entry["details"] = details

        with self._lock:
            history = self.read_history()
            history.append(entry)
            serialized = json.dumps(history, indent=2)
            self._log_path.write_text(f"{serialized}\n", encoding="utf-8")

    def read_history(self) -> List[Dict[str, object]]:
        if not self._log_path.exists():
            return []
        raw_content = self._log_path.read_text(encoding="utf-8").strip()
        if not raw_content:
            return []
        try:
            data = json.loads(raw_content)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Change journal is corrupted and cannot be parsed: {exc.msg}"
            ) from exc
        if not isinstance(data, list):
            raise ValueError("Change journal must contain a JSON list of entries.")
        return data


def execute_with_journal(
    command: str, action: Callable[[], Dict[str, object]], journal: ChangeJournal
) -> Dict[str, object]:
    """Run ``action`` and record its outcome in ``journal``."""

    start_time = _utc_now()
    details: Optional[Dict[str, object]] = None
    status = "success"
    message: Optional[str] = None

    try:
        details = action()
        if details.get("applied") is False:
            status = "ignored"
            message = str(details.get("message", ""))
        return details
    except Exception as exc:
        status = "failed"
        message = str(exc)
        raise
    finally:
        try:
            journal.log(
                command,
                status,
                start_time=start_time,
                message=message,
                details=details,
            )
        except (ValueError, OSError):
            LOGGER.exception("Could not record %s in change journal", command)


def _treatment_from_args(args: argparse.Namespace) -> Treatment:
    return Treatment(
        details=args.details,
        hospital=args.hospital,
        provider=args.provider,
        patient=args.patient,
        discharged_at=parse_discharged_at(args.discharged),
    )


def _describe(treatment: Treatment) -> Dict[str, object]:
    return {
        "details": treatment.details,
        "hospital": treatment.hospital,
        "provider": treatment.provider,
        "patient": treatment.patient,
        "discharged_at": format_discharged_at(treatment.discharged_at),
    }


def run_validate(workflow: TreatmentWorkflow) -> Dict[str, object]:
    return summarize(workflow.load()).to_dict()


def run_report(workflow: TreatmentWorkflow) -> Dict[str, object]:
    report_path = create_integrity_report(summarize(workflow.load()))
    return {"report": str(report_path)}


def run_edit(workflow: TreatmentWorkflow, index: int, values: Treatment) -> Dict[str, object]:
    result, refreshed = workflow.edit(workflow.load(), index, values)
    return {
        "applied": result.applied,
        "index": result.index,
        "message": result.message,
        "treatment": _describe(values),
        "treatments": len(refreshed.treatments),
    }


def run_append(workflow: TreatmentWorkflow, values: Treatment) -> Dict[str, object]:
    result, refreshed = workflow.append(workflow.load(), values)
    return {
        "applied": result.applied,
        "index": result.index,
        "message": result.message,
        "treatment": _describe(values),
        "treatments": len(refreshed.treatments),
    }


def _add_treatment_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--details", default="", help="Treatment details")
    parser.add_argument("--hospital", default="", help="Hospital name")
    parser.add_argument("--provider", default="", help="Provider name")
    parser.add_argument("--patient", default="", help="Patient medical reference number")
    parser.add_argument("--discharged", default="", help="Discharge date/time, e.g. '2024-01-02 10:00'")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hospital treatment records integrity tool")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory containing Hospitals.csv, Providers.csv, Patients.csv and Treatments.csv",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("validate", help="Load every file and print a JSON summary")
    subparsers.add_parser("report", help="Write a PDF integrity report")

    edit_parser = subparsers.add_parser("edit", help="Overwrite a treatment by position")
    edit_parser.add_argument("--index", type=int, required=True, help="Zero-based treatment index")
    _add_treatment_arguments(edit_parser)

    append_parser = subparsers.add_parser("append", help="Add a treatment to the end of the file")
    _add_treatment_arguments(append_parser)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    workflow = TreatmentWorkflow(RecordPaths.from_directory(args.data_dir or config.data_dir()))

    try:
        if args.command == "validate":
            output = run_validate(workflow)
        elif args.command == "report":
            output = run_report(workflow)
        else:
            journal = ChangeJournal(config.journal_path())
            values = _treatment_from_args(args)
            if args.command == "edit":
                output = execute_with_journal(
                    "edit", lambda: run_edit(workflow, args.index, values), journal
                )
            else:
                output = execute_with_journal(
                    "append", lambda: run_append(workflow, values), journal
                )
    except (ValueError, OSError) as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    print(json.dumps(output, indent=2))
    if output.get("applied") is False:
        return EXIT_NOT_APPLIED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
