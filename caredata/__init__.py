"""Record types shared by the loaders and the treatment workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Hospital:
    """Row of ``Hospitals.csv``: ``"Name","Identity"``."""

    name: str
    identity: str


@dataclass(frozen=True)
class Provider:
    """Row of ``Providers.csv``: ``"Name","Number","Hospital","Doctor"``."""

    name: str
    number: str
    hospital: str
    is_doctor: bool = False


@dataclass(frozen=True)
class Patient:
    """Row of ``Patients.csv``: ``"Medical Reference Number","Patient Name"``."""

    medical_reference_number: str
    name: str


@dataclass
class Treatment:
    """Row of ``Treatments.csv``.

    ``"Details","Hospital","Provider","Patient","Date/Time Discharged"``

    Treatments have no key of their own; callers address them by position in
    the loaded list.
    """

    details: str
    hospital: str
    provider: str
    patient: str
    discharged_at: Optional[datetime] = None


@dataclass(frozen=True)
class RejectedRecord:
    """A record dropped by one of the loaders, with the reason it failed."""

    kind: str
    reason: str
    record: object


@dataclass
class LoadResult(Generic[T]):
    """Valid records plus diagnostics for the ones that were filtered out."""

    records: List[T] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)


__all__ = [
    "Hospital",
    "LoadResult",
    "Patient",
    "Provider",
    "RejectedRecord",
    "Treatment",
]
