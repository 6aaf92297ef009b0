"""Export applications as CSV or as a printable HTML report."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape

from applytrack.tracker.models import Application, utc_now

CSV_HEADERS = [
    "Company",
    "Position",
    "Status",
    "Priority",
    "Location",
    "Application Date",
    "Job URL",
    "Notes",
]

REPORT_TEMPLATE = "applications_report.html.j2"


def status_label(record: Application) -> str:
    return record.status.value.replace("_", " ")


def csv_row(record: Application) -> list[str]:
    return [
        record.company_name,
        record.position_title,
        status_label(record),
        record.priority.value,
        record.location_city or "",
        record.application_date.date().isoformat(),
        record.job_url or "",
        record.notes or "",
    ]


def export_csv(records: Iterable[Application], path: Path) -> Path:
    """Write one quoted CSV row per application under a header row."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADERS)
        for record in records:
            writer.writerow(csv_row(record))
    return path


def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("applytrack.client", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["status_label"] = status_label
    return env


def render_html(records: Iterable[Application]) -> str:
    records = list(records)
    template = _environment().get_template(REPORT_TEMPLATE)
    return template.render(
        applications=records,
        exported_on=utc_now().date().isoformat(),
    )


def export_html(records: Iterable[Application], path: Path) -> Path:
    """Write a self-contained report that prints itself when opened."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(records), encoding="utf-8")
    return path
