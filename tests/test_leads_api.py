import csv
import io

from estate_crm.services.lead_export import CSV_HEADER


def lead_payload(**overrides):
    payload = {
        "name": "Faisal Khan",
        "mobile": "0300 1234567",
        "email": "faisal@example.com",
        "interest_types": ["apartment"],
        "locations": ["DHA Phase 6"],
        "intentions": ["buy"],
        "budget_min": 25000000,
        "budget_max": 40000000,
        "source": "call",
    }
    payload.update(overrides)
    return payload


async def test_leads_require_authentication(client):
    response = await client.get("/api/v1/leads")
    assert response.status_code == 401


async def test_create_lead_returns_new_lead(client, admin):
    response = await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["mobile"] == "03001234567"
    assert body["status"] == "new"
    assert body["locations"] == ["DHA Phase 6"]


async def test_create_lead_with_invalid_mobile_is_rejected(client, admin):
    response = await client.post("/api/v1/leads", json=lead_payload(mobile="021-35800000"), headers=admin.headers)
    assert response.status_code == 400

    listing = await client.get("/api/v1/leads", headers=admin.headers)
    assert listing.json()["total"] == 0


async def test_create_lead_with_inverted_budget_is_rejected(client, admin):
    response = await client.post(
        "/api/v1/leads", json=lead_payload(budget_min=5000000, budget_max=1000000), headers=admin.headers,
    )
    assert response.status_code == 400


async def test_list_filters_and_pipeline_counts(client, admin):
    created = []
    for name, mobile in [("Zara", "03011111111"), ("Omar", "03022222222"), ("Hina", "03033333333")]:
        response = await client.post("/api/v1/leads", json=lead_payload(name=name, mobile=mobile), headers=admin.headers)
        created.append(response.json())

    await client.put(f"/api/v1/leads/{created[0]['lead_id']}/status", json={"status": "contacted"}, headers=admin.headers)

    response = await client.get("/api/v1/leads", params={"status": "new"}, headers=admin.headers)
    body = response.json()

    assert response.status_code == 200
    assert body["total"] == 3
    assert {lead["name"] for lead in body["leads"]} == {"Omar", "Hina"}
    counts = {row["stage"]: row["count"] for row in body["pipeline"]}
    assert counts["new"] == 2
    assert counts["contacted"] == 1
    assert [row["stage"] for row in body["pipeline"]][-2:] == ["won", "lost"]


async def test_list_rejects_unknown_status_filter(client, admin):
    response = await client.get("/api/v1/leads", params={"status": "cold"}, headers=admin.headers)
    assert response.status_code == 400


async def test_export_has_fixed_header_and_one_row_per_lead(client, admin):
    for i in range(4):
        await client.post(
            "/api/v1/leads", json=lead_payload(name=f"Buyer {i}", mobile=f"0345123456{i}"), headers=admin.headers,
        )
    await client.post("/api/v1/leads", json=lead_payload(name="Renter", mobile="03451234569"), headers=admin.headers)

    response = await client.get("/api/v1/leads/export", params={"search": "buyer"}, headers=admin.headers)
    listing = await client.get("/api/v1/leads", params={"search": "buyer"}, headers=admin.headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "leads.csv" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_HEADER
    assert len(rows) - 1 == len(listing.json()["leads"]) == 4


async def test_status_change_is_logged_once(client, admin):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()
    url = f"/api/v1/leads/{lead['lead_id']}"

    for _ in range(2):
        response = await client.put(f"{url}/status", json={"status": "site-visit"}, headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["status"] == "site-visit"

    activities = (await client.get(f"{url}/activities", headers=admin.headers)).json()
    assert len(activities) == 1
    assert activities[0]["activity_type"] == "status_change"


async def test_status_change_errors(client, admin):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()

    bad_status = await client.put(
        f"/api/v1/leads/{lead['lead_id']}/status", json={"status": "archived"}, headers=admin.headers,
    )
    missing = await client.put(
        "/api/v1/leads/00000000-0000-0000-0000-000000000000/status", json={"status": "won"}, headers=admin.headers,
    )

    assert bad_status.status_code == 400
    assert missing.status_code == 404


async def test_notes_are_appended(client, admin):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()
    url = f"/api/v1/leads/{lead['lead_id']}/activities"

    created = await client.post(url, json={"description": "Wants a corner plot"}, headers=admin.headers)
    blank = await client.post(url, json={"description": "  "}, headers=admin.headers)

    assert created.status_code == 201
    assert created.json()["activity_type"] == "note"
    assert blank.status_code == 400
    assert len((await client.get(url, headers=admin.headers)).json()) == 1


async def test_agent_cannot_see_unassigned_lead(client, admin, agent):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()

    response = await client.get(f"/api/v1/leads/{lead['lead_id']}", headers=agent.headers)
    listing = await client.get("/api/v1/leads", headers=agent.headers)

    assert response.status_code == 404
    assert listing.json()["total"] == 0


async def test_assignment_gives_agent_access(client, admin, agent):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()
    url = f"/api/v1/leads/{lead['lead_id']}"

    forbidden = await client.put(f"{url}/assign", json={"agent_id": str(agent.agent_id)}, headers=agent.headers)
    assigned = await client.put(f"{url}/assign", json={"agent_id": str(agent.agent_id)}, headers=admin.headers)

    assert forbidden.status_code == 403
    assert assigned.status_code == 200
    assert assigned.json()["assigned_agent_id"] == str(agent.agent_id)

    visible = await client.get(url, headers=agent.headers)
    assert visible.status_code == 200

    export = await client.get("/api/v1/leads/export", headers=agent.headers)
    rows = list(csv.reader(io.StringIO(export.text)))
    assert rows[1][CSV_HEADER.index("Assigned Agent")] == "Ahmed Raza"


async def test_only_admin_deletes_leads(client, admin, agent):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=agent.headers)).json()
    url = f"/api/v1/leads/{lead['lead_id']}"
    await client.post(f"{url}/activities", json={"description": "First call"}, headers=agent.headers)

    assert (await client.delete(url, headers=agent.headers)).status_code == 403
    assert (await client.delete(url, headers=admin.headers)).status_code == 204
    assert (await client.get(url, headers=admin.headers)).status_code == 404


async def test_public_inquiry_creates_website_lead(client, admin):
    response = await client.post("/api/v1/leads/inquiry", json={
        "name": "Nadia Hussain",
        "mobile": "+92 321 7654321",
        "subject": "Rental in Clifton",
        "message": "Looking for a 2 bed apartment",
    })

    assert response.status_code == 201, response.text
    lead_id = response.json()["lead_id"]

    lead = (await client.get(f"/api/v1/leads/{lead_id}", headers=admin.headers)).json()
    assert lead["source"] == "website"
    assert lead["status"] == "new"
    assert lead["mobile"] == "+923217654321"
    assert lead["notes"] == "Rental in Clifton\n\nLooking for a 2 bed apartment"


async def test_public_inquiry_rejects_invalid_mobile(client):
    response = await client.post("/api/v1/leads/inquiry", json={"name": "Nadia", "mobile": "12345"})
    assert response.status_code == 400


async def test_patch_with_null_flag_is_a_bad_request(client, admin):
    lead = (await client.post("/api/v1/leads", json=lead_payload(), headers=admin.headers)).json()

    response = await client.patch(
        f"/api/v1/leads/{lead['lead_id']}", json={"whatsapp_opt_in": None}, headers=admin.headers,
    )

    assert response.status_code == 400


async def test_inquiry_with_overlong_name_is_a_bad_request(client):
    response = await client.post("/api/v1/leads/inquiry", json={"name": "N" * 300, "mobile": "03001234567"})
    assert response.status_code == 400
