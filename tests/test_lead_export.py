import csv
import io
from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from estate_crm.services.lead_export import CSV_HEADER, export_leads_csv


def make_lead(name, **overrides):
    lead = dict(
        name=name,
        mobile="03001234567",
        email=None,
        status="new",
        source="website",
        interest_types=[],
        locations=[],
        intentions=[],
        budget_min=None,
        budget_max=None,
        budget_flexible=False,
        assigned_agent_id=None,
        notes=None,
        created_at=datetime(2024, 12, 1, 10, 30, tzinfo=timezone.utc),
    )
    lead.update(overrides)
    return SimpleNamespace(**lead)


def parse(text):
    return list(csv.reader(io.StringIO(text)))


def test_header_only_for_no_leads():
    rows = parse(export_leads_csv([]))
    assert rows == [CSV_HEADER]


def test_one_row_per_lead_in_input_order():
    leads = [make_lead("Ali"), make_lead("Bilal"), make_lead("Fatima")]
    rows = parse(export_leads_csv(leads))

    assert rows[0] == CSV_HEADER
    assert len(rows) - 1 == len(leads)
    assert [r[0] for r in rows[1:]] == ["Ali", "Bilal", "Fatima"]


def test_export_is_deterministic():
    leads = [make_lead("Ali", notes="Wants a corner plot"), make_lead("Bilal")]
    assert export_leads_csv(leads) == export_leads_csv(leads)


def test_row_contents():
    agent_id = uuid4()
    lead = make_lead(
        "Usman",
        email="usman@mail.pk",
        status="site-visit",
        source="referral",
        interest_types=["House Buyout", "Plot Buyout"],
        locations=["DHA Phase 6", "Clifton Block 5"],
        intentions=["Investment"],
        budget_min=30_000_000,
        budget_max=85_000_000,
        budget_flexible=True,
        assigned_agent_id=agent_id,
        notes='Said "call after 6pm", prefers WhatsApp',
    )
    row = dict(zip(CSV_HEADER, parse(export_leads_csv([lead], {agent_id: "Fatima Khan"}))[1]))

    assert row["Status"] == "site-visit"
    assert row["Interest Types"] == "House Buyout; Plot Buyout"
    assert row["Locations"] == "DHA Phase 6; Clifton Block 5"
    assert row["Budget Min"] == "30000000"
    assert row["Budget Flexible"] == "Yes"
    assert row["Assigned Agent"] == "Fatima Khan"
    assert row["Notes"] == 'Said "call after 6pm", prefers WhatsApp'
    assert row["Created At"] == "2024-12-01T10:30:00+00:00"


def test_missing_values_are_blank():
    row = parse(export_leads_csv([make_lead("Ali", assigned_agent_id=uuid4())]))[1]
    record = dict(zip(CSV_HEADER, row))
    assert record["Email"] == ""
    assert record["Budget Max"] == ""
    assert record["Budget Flexible"] == "No"
    # unknown agent id resolves to an empty cell
    assert record["Assigned Agent"] == ""
