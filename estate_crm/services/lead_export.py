import csv
import io
from typing import Iterable, Mapping, Optional
from uuid import UUID

CSV_HEADER = [
    "Name",
    "Mobile",
    "Email",
    "Status",
    "Source",
    "Interest Types",
    "Locations",
    "Intentions",
    "Budget Min",
    "Budget Max",
    "Budget Flexible",
    "Assigned Agent",
    "Notes",
    "Created At",
]


def _join(values) -> str:
    return "; ".join(values or [])


def _cell(value) -> str:
    return "" if value is None else str(value)


def lead_to_row(lead, agent_names: Mapping[UUID, str]) -> list[str]:
    return [
        lead.name,
        lead.mobile,
        _cell(lead.email),
        lead.status,
        lead.source,
        _join(lead.interest_types),
        _join(lead.locations),
        _join(lead.intentions),
        _cell(lead.budget_min),
        _cell(lead.budget_max),
        "Yes" if lead.budget_flexible else "No",
        agent_names.get(lead.assigned_agent_id, "") if lead.assigned_agent_id else "",
        _cell(lead.notes),
        lead.created_at.isoformat() if lead.created_at else "",
    ]


def export_leads_csv(leads: Iterable, agent_names: Optional[Mapping[UUID, str]] = None) -> str:
    """Render leads as CSV, one row per lead in the order given."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for lead in leads:
        writer.writerow(lead_to_row(lead, agent_names or {}))
    return buffer.getvalue()
