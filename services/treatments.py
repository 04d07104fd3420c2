"""Treatment loader, cross-reference validation and writer.

Treatments reference the other three record kinds by text:

* ``hospital`` must equal a loaded hospital *name*;
* ``patient`` must equal a loaded patient's *medical reference number*
  (not the patient's display name);
* ``provider``, when filled in, must equal a loaded provider *name*.

All comparisons ignore case. A treatment carrying a discharge time also needs
both a provider and details. Treatments failing any rule are dropped from the
loaded list and reported through the ``LoadResult`` diagnostics.

Saving always rewrites the entire file. The new content is written next to the
target and moved over it with ``os.replace`` so a failed write never leaves a
truncated file behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from caredata import Hospital, LoadResult, Patient, Provider, RejectedRecord, Treatment
from caredata.csv_loader import DELIMITER, QUOTE, PathLike, clean_field, load_csv

logger = logging.getLogger(__name__)

FIELD_COUNT = 5
HEADER = ("Details", "Hospital", "Provider", "Patient", "Date/Time Discharged")
DISCHARGE_FORMAT = "%Y-%m-%d %H:%M"
UNWRITABLE_CHARACTERS = frozenset(",\"\r\n")

_DISCHARGE_INPUT_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
    "%Y-%m-%d",
)


def parse_discharged_at(value: Any) -> Optional[datetime]:
    """Parse a discharge time; blank or unreadable text yields ``None``."""

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    for fmt in _DISCHARGE_INPUT_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Failed to parse discharge time: %s", value)
        return None


def format_discharged_at(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(DISCHARGE_FORMAT)


def _map_treatment(fields: Sequence[str]) -> Treatment:
    return Treatment(
        details=clean_field(fields[0]),
        hospital=clean_field(fields[1]),
        provider=clean_field(fields[2]),
        patient=clean_field(fields[3]),
        discharged_at=parse_discharged_at(clean_field(fields[4])),
    )


class _References:
    """Case-insensitive lookup tables built once per load."""

    def __init__(
        self,
        hospitals: Iterable[Hospital],
        providers: Iterable[Provider],
        patients: Iterable[Patient],
    ) -> None:
        self.hospital_names = {hospital.name.lower() for hospital in hospitals}
        self.provider_names = {provider.name.lower() for provider in providers}
        self.patient_numbers = {patient.medical_reference_number.lower() for patient in patients}

    def rejection_reason(self, treatment: Treatment) -> Optional[str]:
        if not treatment.hospital.strip():
            return "Treatment missing hospital"
        if not treatment.patient.strip():
            return "Treatment missing patient"
        if treatment.hospital.lower() not in self.hospital_names:
            return f"Treatment references unknown hospital: {treatment.hospital}"
        if treatment.patient.lower() not in self.patient_numbers:
            return f"Treatment references unknown patient: {treatment.patient}"
        if treatment.discharged_at is not None and (
            not treatment.provider.strip() or not treatment.details.strip()
        ):
            return "Discharged treatment missing provider or details"
        if treatment.provider.strip() and treatment.provider.lower() not in self.provider_names:
            return f"Treatment references unknown provider: {treatment.provider}"
        return None


def treatment_rejection_reason(
    treatment: Treatment,
    hospitals: Iterable[Hospital],
    providers: Iterable[Provider],
    patients: Iterable[Patient],
) -> Optional[str]:
    """Return the first rule ``treatment`` breaks, or ``None`` when it is valid."""

    return _References(hospitals, providers, patients).rejection_reason(treatment)


def is_valid_treatment(
    treatment: Treatment,
    hospitals: Iterable[Hospital],
    providers: Iterable[Provider],
    patients: Iterable[Patient],
) -> bool:
    return treatment_rejection_reason(treatment, hospitals, providers, patients) is None


def read_treatments(
    path: PathLike,
    hospitals: Sequence[Hospital],
    providers: Sequence[Provider],
    patients: Sequence[Patient],
) -> LoadResult[Treatment]:
    """Load treatments from ``path`` and check them against the reference lists."""

    references = _References(hospitals, providers, patients)
    result: LoadResult[Treatment] = LoadResult()
    for treatment in load_csv(path, _map_treatment, min_fields=FIELD_COUNT):
        reason = references.rejection_reason(treatment)
        if reason is None:
            result.records.append(treatment)
            continue
        logger.warning("%s (details=%r)", reason, treatment.details)
        result.rejected.append(RejectedRecord(kind="treatment", reason=reason, record=treatment))

    logger.info("Loaded %d treatment(s), rejected %d", len(result.records), len(result.rejected))
    return result


def load_treatments(
    path: PathLike,
    hospitals: Sequence[Hospital],
    providers: Sequence[Provider],
    patients: Sequence[Patient],
) -> List[Treatment]:
    return read_treatments(path, hospitals, providers, patients).records


class UnwritableValueError(ValueError):
    """Raised when a value would not survive being written and read back."""


def _quote_row(values: Iterable[str]) -> str:
    return DELIMITER.join(f"{QUOTE}{value}{QUOTE}" for value in values)


def _check_writable(label: str, value: str) -> str:
    forbidden = sorted(char for char in UNWRITABLE_CHARACTERS if char in value)
    if forbidden:
        raise UnwritableValueError(f"Treatment {label} cannot contain {''.join(forbidden)!r}: {value!r}")
    return value


def serialize_treatment(treatment: Treatment) -> str:
    """Render one row, refusing values the loader could not split back apart."""

    return _quote_row(
        (
            _check_writable("details", treatment.details),
            _check_writable("hospital", treatment.hospital),
            _check_writable("provider", treatment.provider),
            _check_writable("patient", treatment.patient),
            format_discharged_at(treatment.discharged_at),
        )
    )


def save_treatments(path: PathLike, treatments: Iterable[Treatment]) -> None:
    """Replace the contents of ``path`` with ``treatments``.

    Every row is rendered before the file is touched, so an
    ``UnwritableValueError`` leaves the existing file as it was.
    """

    target = Path(path)
    lines = [_quote_row(HEADER)]
    lines.extend(serialize_treatment(treatment) for treatment in treatments)
    payload = "\n".join(lines) + "\n"

    target.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(payload)
        os.replace(handle.name, target)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise
    logger.info("Saved %d treatment(s) to %s", len(lines) - 1, target)


__all__ = [
    "DISCHARGE_FORMAT",
    "HEADER",
    "UnwritableValueError",
    "format_discharged_at",
    "is_valid_treatment",
    "load_treatments",
    "parse_discharged_at",
    "read_treatments",
    "save_treatments",
    "serialize_treatment",
    "treatment_rejection_reason",
]
