"""Hospital loader."""

from __future__ import annotations

import logging
from typing import List, Sequence

from caredata import Hospital, LoadResult, RejectedRecord
from caredata.csv_loader import PathLike, clean_field, load_csv

logger = logging.getLogger(__name__)

FIELD_COUNT = 2


def _map_hospital(fields: Sequence[str]) -> Hospital:
    return Hospital(name=clean_field(fields[0]), identity=clean_field(fields[1]))


def is_valid_hospital(hospital: Hospital) -> bool:
    return bool(hospital.name.strip()) and bool(hospital.identity.strip())


def read_hospitals(path: PathLike) -> LoadResult[Hospital]:
    """Load hospitals from ``path`` keeping diagnostics for dropped rows."""

    result: LoadResult[Hospital] = LoadResult()
    for hospital in load_csv(path, _map_hospital, min_fields=FIELD_COUNT):
        if is_valid_hospital(hospital):
            result.records.append(hospital)
            continue
        reason = f"Hospital missing name or identity: {hospital.name} / {hospital.identity}"
        logger.warning(reason)
        result.rejected.append(RejectedRecord(kind="hospital", reason=reason, record=hospital))

    logger.info("Loaded %d hospital(s), rejected %d", len(result.records), len(result.rejected))
    return result


def load_hospitals(path: PathLike) -> List[Hospital]:
    return read_hospitals(path).records


__all__ = ["is_valid_hospital", "load_hospitals", "read_hospitals"]
