"""Provider loader and lookups."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from caredata import LoadResult, Provider, RejectedRecord
from caredata.csv_loader import PathLike, clean_field, load_csv
from caredata.names import is_valid_name

logger = logging.getLogger(__name__)

FIELD_COUNT = 4
DOCTOR_FLAG = "yes"


def _map_provider(fields: Sequence[str]) -> Provider:
    return Provider(
        name=clean_field(fields[0]),
        number=clean_field(fields[1]),
        hospital=clean_field(fields[2]),
        is_doctor=clean_field(fields[3]).lower() == DOCTOR_FLAG,
    )


def _rejection_reason(provider: Provider) -> Optional[str]:
    if not provider.name.strip() or not provider.number.strip():
        return f"Provider missing name or number: {provider.name} / {provider.number}"
    if not is_valid_name(provider.name):
        return f"Invalid provider name: {provider.name}"
    return None


def is_valid_provider(provider: Provider) -> bool:
    return _rejection_reason(provider) is None


def read_providers(path: PathLike) -> LoadResult[Provider]:
    """Load providers from ``path`` keeping diagnostics for dropped rows."""

    result: LoadResult[Provider] = LoadResult()
    for provider in load_csv(path, _map_provider, min_fields=FIELD_COUNT):
        reason = _rejection_reason(provider)
        if reason is None:
            result.records.append(provider)
            continue
        logger.warning(reason)
        result.rejected.append(RejectedRecord(kind="provider", reason=reason, record=provider))

    logger.info("Loaded %d provider(s), rejected %d", len(result.records), len(result.rejected))
    return result


def load_providers(path: PathLike) -> List[Provider]:
    return read_providers(path).records


def providers_for_hospital(providers: Iterable[Provider], hospital_name: Optional[str]) -> List[Provider]:
    """Return the providers attached to ``hospital_name``.

    Matching is case-insensitive on the provider's hospital column. A blank
    name selects every provider.
    """

    if not hospital_name or not hospital_name.strip():
        return list(providers)
    wanted = hospital_name.strip().lower()
    return [provider for provider in providers if provider.hospital.lower() == wanted]


__all__ = ["is_valid_provider", "load_providers", "providers_for_hospital", "read_providers"]
