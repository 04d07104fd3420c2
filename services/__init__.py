"""Loaders, validators and the treatment workflow."""

from .editing import EditResult, RecordPaths, RecordSet, TreatmentWorkflow, append_treatment, edit_treatment
from .hospitals import load_hospitals, read_hospitals
from .patients import load_patients, read_patients
from .providers import load_providers, providers_for_hospital, read_providers
from .treatments import load_treatments, read_treatments, save_treatments

__all__ = [
    "EditResult",
    "RecordPaths",
    "RecordSet",
    "TreatmentWorkflow",
    "append_treatment",
    "edit_treatment",
    "load_hospitals",
    "load_patients",
    "load_providers",
    "load_treatments",
    "providers_for_hospital",
    "read_hospitals",
    "read_patients",
    "read_providers",
    "read_treatments",
    "save_treatments",
]
