"""Edit and append workflow for the treatment list.

The hospital, provider and patient lists are read-only snapshots. Only the
treatment list changes: an edit overwrites one element by position, an append
adds one at the end. Either way the whole list is saved and every file is
reloaded, so callers always continue from a freshly validated ``RecordSet``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, MutableSequence, Tuple

from caredata import Hospital, Patient, Provider, RejectedRecord, Treatment
from caredata.csv_loader import PathLike
from services.hospitals import read_hospitals
from services.patients import read_patients
from services.providers import read_providers
from services.treatments import read_treatments, save_treatments

logger = logging.getLogger(__name__)

HOSPITALS_FILE = "Hospitals.csv"
PROVIDERS_FILE = "Providers.csv"
PATIENTS_FILE = "Patients.csv"
TREATMENTS_FILE = "Treatments.csv"


@dataclass(frozen=True)
class RecordPaths:
    """Locations of the four backing files."""

    hospitals: Path
    providers: Path
    patients: Path
    treatments: Path

    @classmethod
    def from_directory(cls, directory: PathLike) -> "RecordPaths":
        base = Path(directory)
        return cls(
            hospitals=base / HOSPITALS_FILE,
            providers=base / PROVIDERS_FILE,
            patients=base / PATIENTS_FILE,
            treatments=base / TREATMENTS_FILE,
        )


@dataclass
class RecordSet:
    """One consistent, validated view of all four files."""

    hospitals: List[Hospital] = field(default_factory=list)
    providers: List[Provider] = field(default_factory=list)
    patients: List[Patient] = field(default_factory=list)
    treatments: List[Treatment] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)


@dataclass(frozen=True)
class EditResult:
    """Outcome of a single edit or append."""

    applied: bool
    index: int
    message: str


def edit_treatment(treatments: MutableSequence[Treatment], index: int, values: Treatment) -> EditResult:
    """Overwrite the treatment at ``index`` with the fields of ``values``.

    An index outside ``0 <= index < len(treatments)`` changes nothing and is
    reported with ``applied=False``.
    """

    if not 0 <= index < len(treatments):
        message = f"Treatment index {index} is out of range for {len(treatments)} treatment(s)"
        logger.warning(message)
        return EditResult(applied=False, index=index, message=message)

    target = treatments[index]
    target.details = values.details
    target.hospital = values.hospital
    target.provider = values.provider
    target.patient = values.patient
    target.discharged_at = values.discharged_at
    logger.info("Updated treatment %d", index)
    return EditResult(applied=True, index=index, message=f"Updated treatment {index}")


def append_treatment(treatments: MutableSequence[Treatment], values: Treatment) -> EditResult:
    treatments.append(replace(values))
    index = len(treatments) - 1
    logger.info("Appended treatment %d", index)
    return EditResult(applied=True, index=index, message=f"Added treatment {index}")


class TreatmentWorkflow:
    """Loads the four files and applies treatment changes.

    Changes made through one workflow instance are serialized by a lock. Other
    processes writing the same files are not coordinated with; the last save
    wins.
    """

    def __init__(self, paths: RecordPaths) -> None:
        self._paths = paths
        self._lock = threading.Lock()

    @property
    def paths(self) -> RecordPaths:
        return self._paths

    def load(self) -> RecordSet:
        hospitals = read_hospitals(self._paths.hospitals)
        providers = read_providers(self._paths.providers)
        patients = read_patients(self._paths.patients)
        treatments = read_treatments(
            self._paths.treatments,
            hospitals.records,
            providers.records,
            patients.records,
        )
        return RecordSet(
            hospitals=hospitals.records,
            providers=providers.records,
            patients=patients.records,
            treatments=treatments.records,
            rejected=[
                *hospitals.rejected,
                *providers.rejected,
                *patients.rejected,
                *treatments.rejected,
            ],
        )

    def edit(self, record_set: RecordSet, index: int, values: Treatment) -> Tuple[EditResult, RecordSet]:
        """Edit one treatment, save the list and return the reloaded view.

        The list is saved even when the index was out of range.
        """

        with self._lock:
            result = edit_treatment(record_set.treatments, index, values)
            return result, self._save_and_reload(record_set)

    def append(self, record_set: RecordSet, values: Treatment) -> Tuple[EditResult, RecordSet]:
        with self._lock:
            result = append_treatment(record_set.treatments, values)
            return result, self._save_and_reload(record_set)

    def _save_and_reload(self, record_set: RecordSet) -> RecordSet:
        save_treatments(self._paths.treatments, record_set.treatments)
        return self.load()


__all__ = [
    "EditResult",
    "RecordPaths",
    "RecordSet",
    "TreatmentWorkflow",
    "append_treatment",
    "edit_treatment",
]
