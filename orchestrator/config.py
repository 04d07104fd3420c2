"""Environment-driven locations and settings."""

from __future__ import annotations

import os
from pathlib import Path


def _project_root() -> Path:
    """Return the project root directory."""

    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    """Return the directory holding the four CSV files.

    The directory can be overridden via the ``RECORDS_DATA_DIR`` environment
    variable.
    """

    override = os.getenv("RECORDS_DATA_DIR")
    return Path(override) if override else _project_root() / "InputCSV"


def reports_dir() -> Path:
    """Return the report output directory, creating it if necessary."""

    override = os.getenv("RECORDS_REPORT_DIR")
    reports_path = Path(override) if override else _project_root() / "reports"
    reports_path.mkdir(parents=True, exist_ok=True)
    return reports_path


def journal_path() -> Path:
    override = os.getenv("RECORDS_JOURNAL_PATH")
    return Path(override) if override else Path(__file__).resolve().parent / "change_log.json"


def log_level() -> str:
    return os.getenv("RECORDS_LOG_LEVEL", "INFO").upper()
