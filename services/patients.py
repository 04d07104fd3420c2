"""Patient loader."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from caredata import LoadResult, Patient, RejectedRecord
from caredata.csv_loader import PathLike, clean_field, load_csv
from caredata.names import is_valid_name

logger = logging.getLogger(__name__)

FIELD_COUNT = 2


def _map_patient(fields: Sequence[str]) -> Patient:
    return Patient(
        medical_reference_number=clean_field(fields[0]),
        name=clean_field(fields[1]),
    )


def _rejection_reason(patient: Patient) -> Optional[str]:
    if not patient.medical_reference_number.strip() or not patient.name.strip():
        return (
            "Patient missing reference number or name: "
            f"{patient.medical_reference_number} / {patient.name}"
        )
    if not is_valid_name(patient.name):
        return f"Invalid patient name: {patient.name}"
    return None


def is_valid_patient(patient: Patient) -> bool:
    return _rejection_reason(patient) is None


def read_patients(path: PathLike) -> LoadResult[Patient]:
    """Load patients from ``path`` keeping diagnostics for dropped rows."""

    result: LoadResult[Patient] = LoadResult()
    for patient in load_csv(path, _map_patient, min_fields=FIELD_COUNT):
        reason = _rejection_reason(patient)
        if reason is None:
            result.records.append(patient)
            continue
        logger.warning(reason)
        result.rejected.append(RejectedRecord(kind="patient", reason=reason, record=patient))

    logger.info("Loaded %d patient(s), rejected %d", len(result.records), len(result.rejected))
    return result


def load_patients(path: PathLike) -> List[Patient]:
    return read_patients(path).records


__all__ = ["is_valid_patient", "load_patients", "read_patients"]
