"""Integrity report for the hospital, provider, patient and treatment files.

This module loads the four record files, counts how many records of each kind
survived validation and renders the result as a one page PDF. The report lists:

* Loaded and rejected counts per record kind.
* The reason each rejected record was dropped (first entries only).

It is meant to be run after the CSV files are refreshed or edited so data
stewards can see which rows are being filtered out and why.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

try:
    from reportlab.lib.pagesizes import letter
    from reportlab.lib.units import inch
    from reportlab.pdfgen import canvas
except ImportError as exc:  # pragma: no cover - defensive guard for missing dependency
    raise ImportError(
        "ReportLab is required to generate integrity reports. Install it with 'pip install reportlab'."
    ) from exc

from orchestrator import config
from services.editing import RecordSet

LOGGER = logging.getLogger(__name__)

RECORD_KINDS = ("hospital", "provider", "patient", "treatment")
MAX_REJECTION_LINES = 25


@dataclass
class IntegritySummary:
    """Container for loaded/rejected counts and rejection reasons."""

    loaded: Dict[str, int]
    rejected: Dict[str, int]
    reasons: List[str] = field(default_factory=list)

    @property
    def total_loaded(self) -> int:
        return sum(self.loaded.values())

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "loaded": dict(self.loaded),
            "rejected": dict(self.rejected),
            "total_loaded": self.total_loaded,
            "total_rejected": self.total_rejected,
            "reasons": list(self.reasons),
        }


def summarize(record_set: RecordSet) -> IntegritySummary:
    loaded = {
        "hospital": len(record_set.hospitals),
        "provider": len(record_set.providers),
        "patient": len(record_set.patients),
        "treatment": len(record_set.treatments),
    }
    counts = Counter(item.kind for item in record_set.rejected)
    rejected = {kind: counts.get(kind, 0) for kind in RECORD_KINDS}
    reasons = [item.reason for item in record_set.rejected]

    LOGGER.info(
        "Computed integrity summary - loaded: %d, rejected: %d",
        sum(loaded.values()),
        len(reasons),
    )
    return IntegritySummary(loaded=loaded, rejected=rejected, reasons=reasons)


def _report_filename(generated_at: datetime, output_dir: Optional[Path]) -> Path:
    directory = output_dir or config.reports_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"integrity_report_{generated_at.strftime('%Y%m%d-%H%M')}.pdf"


def _draw_header(pdf: canvas.Canvas, title: str, generated_at: datetime) -> None:
    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawString(1 * inch, 10.5 * inch, title)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(
        1 * inch,
        10.1 * inch,
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
    )


def _draw_counts(pdf: canvas.Canvas, summary: IntegritySummary) -> float:
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(1 * inch, 9.5 * inch, "Record Counts")

    pdf.setFont("Helvetica", 11)
    y = 9.1
    for kind in RECORD_KINDS:
        pdf.drawString(
            1.2 * inch,
            y * inch,
            f"{kind.title()}s: {summary.loaded.get(kind, 0)} loaded, {summary.rejected.get(kind, 0)} rejected",
        )
        y -= 0.3
    return y


def _draw_reasons(pdf: canvas.Canvas, summary: IntegritySummary, top: float) -> None:
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(1 * inch, (top - 0.3) * inch, "Rejected Records")

    pdf.setFont("Helvetica", 9)
    y = top - 0.6
    if not summary.reasons:
        pdf.drawString(1.2 * inch, y * inch, "No records were rejected.")
        return
    for reason in summary.reasons[:MAX_REJECTION_LINES]:
        pdf.drawString(1.2 * inch, y * inch, reason[:110])
        y -= 0.22
    remaining = len(summary.reasons) - MAX_REJECTION_LINES
    if remaining > 0:
        pdf.drawString(1.2 * inch, y * inch, f"... and {remaining} more")


def create_integrity_report(summary: IntegritySummary, output_dir: Optional[Path] = None) -> Path:
    generated_at = datetime.now()
    report_path = _report_filename(generated_at, output_dir)
    pdf = canvas.Canvas(str(report_path), pagesize=letter)
    _draw_header(pdf, "Record Integrity Report", generated_at)
    bottom = _draw_counts(pdf, summary)
    _draw_reasons(pdf, summary, bottom)
    pdf.showPage()
    pdf.save()
    LOGGER.info("Integrity report created at %s", report_path)
    return report_path


__all__ = ["IntegritySummary", "create_integrity_report", "summarize"]
