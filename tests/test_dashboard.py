URL = "/api/v1/agents/dashboard"


async def add_lead(client, headers, name, mobile, status=None):
    lead = (await client.post("/api/v1/leads", json={"name": name, "mobile": mobile}, headers=headers)).json()
    if status:
        await client.put(f"/api/v1/leads/{lead['lead_id']}/status", json={"status": status}, headers=headers)
    return lead


async def test_dashboard_numbers(client, admin, agent):
    await client.post("/api/v1/admin/properties", json={
        "title": "Plot in DHA City", "type": "plot", "purpose": "buy", "price": 12000000,
        "area": 500, "area_unit": "sqyd", "location": "DHA City", "status": "published",
    }, headers=admin.headers)

    await add_lead(client, admin.headers, "Asad", "03001110001", "won")
    await add_lead(client, admin.headers, "Rabia", "03001110002", "contacted")
    await add_lead(client, admin.headers, "Tariq", "03001110003")
    await add_lead(client, agent.headers, "Mehwish", "03001110004", "lost")

    response = await client.get(URL, headers=admin.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {
        "published_listings": 1,
        "total_leads": 4,
        "won_leads": 1,
        "hot_leads": 2,
        "conversion_rate": 25.0,
    }
    counts = {row["stage"]: row["count"] for row in body["pipeline"]}
    assert counts == {
        "new": 1, "contacted": 1, "qualified": 0, "site-visit": 0, "negotiation": 0, "won": 1, "lost": 1,
    }
    assert [lead["name"] for lead in body["recent_leads"]] == ["Mehwish", "Tariq", "Rabia", "Asad"]

    performance = {row["name"]: row for row in body["agent_performance"]}
    assert performance["Ahmed Raza"]["total_leads"] == 1
    assert performance["Ahmed Raza"]["active_leads"] == 0
    assert performance["Sara Sheikh"]["total_leads"] == 0


async def test_agent_dashboard_is_scoped(client, admin, agent):
    await add_lead(client, admin.headers, "Asad", "03001110001")
    await add_lead(client, agent.headers, "Mehwish", "03001110004", "won")

    body = (await client.get(URL, headers=agent.headers)).json()

    assert body["summary"]["total_leads"] == 1
    assert body["summary"]["conversion_rate"] == 100.0
    assert [lead["name"] for lead in body["recent_leads"]] == ["Mehwish"]
    assert [row["name"] for row in body["agent_performance"]] == ["Ahmed Raza"]


async def test_empty_dashboard(client, admin):
    summary = (await client.get(URL, headers=admin.headers)).json()["summary"]
    assert summary["total_leads"] == 0
    assert summary["conversion_rate"] == 0.0


async def test_dashboard_is_cached_per_scope(client, admin, agent, redis):
    first = (await client.get(URL, headers=admin.headers)).json()
    await add_lead(client, admin.headers, "Late arrival", "03001110009")
    second = (await client.get(URL, headers=admin.headers)).json()

    assert second == first
    assert await redis.get("dashboard:all")
    assert 0 < await redis.ttl("dashboard:all") <= 300

    await redis.delete("dashboard:all")
    third = (await client.get(URL, headers=admin.headers)).json()
    assert third["summary"]["total_leads"] == 1

    await client.get(URL, headers=agent.headers)
    assert await redis.get(f"dashboard:{agent.agent_id}")
