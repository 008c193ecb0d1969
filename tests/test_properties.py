import pytest

from estate_crm.core.errors import ValidationError
from estate_crm.services.property_services import parse_price_range

ADMIN_URL = "/api/v1/admin/properties"


def listing(**overrides):
    data = {
        "title": "3 Bed Apartment, Sea View",
        "type": "apartment",
        "purpose": "rent",
        "price": 180000,
        "price_label": "1.8 Lac/month",
        "area": 2200,
        "area_unit": "sqft",
        "bedrooms": 3,
        "bathrooms": 3,
        "location": "Clifton",
        "block": "Block 2",
        "features": ["Lift", "Backup generator"],
        "status": "published",
    }
    data.update(overrides)
    return data


@pytest.fixture
async def inventory(client, admin):
    """A small mixed inventory; returns created listings keyed by a short label."""
    specs = {
        "clifton_rent": listing(),
        "dha_rent_block": listing(title="Flat near Clifton Block 5", location="DHA Phase 5", block="Clifton Block 5", price=95000),
        "clifton_sale": listing(title="Bungalow", type="house", purpose="buy", price=85000000, location="Clifton"),
        "clifton_draft": listing(title="Unreviewed flat", status="draft"),
        "bahria_rent": listing(title="Bahria apartment", location="Bahria Town", block="Precinct 10", price=60000, featured=True),
        "office": listing(title="Shahrah-e-Faisal office", type="office", purpose="rent", location="PECHS", block=None, price=300000),
    }
    created = {}
    for key, data in specs.items():
        response = await client.post(ADMIN_URL, json=data, headers=admin.headers)
        assert response.status_code == 201, response.text
        created[key] = response.json()
    return created


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, (None, None)),
        ("5000000-20000000", (5000000, 20000000)),
        ("-100000", (None, 100000)),
        ("100000-", (100000, None)),
    ],
)
def test_parse_price_range(raw, expected):
    assert parse_price_range(raw) == expected


@pytest.mark.parametrize("raw", ["100000", "abc-def", "500-100"])
def test_parse_price_range_rejects(raw):
    with pytest.raises(ValidationError):
        parse_price_range(raw)


async def test_rent_in_clifton_matches_location_or_block(client, inventory):
    response = await client.get("/api/v1/properties", params={"purpose": "rent", "location": "Clifton"})

    assert response.status_code == 200
    titles = {p["title"] for p in response.json()}
    assert titles == {"3 Bed Apartment, Sea View", "Flat near Clifton Block 5"}
    for prop in response.json():
        assert prop["status"] == "published"
        assert prop["purpose"] == "rent"
        assert "clifton" in (prop["location"] + " " + (prop["block"] or "")).lower()


async def test_location_search_is_case_insensitive(client, inventory):
    response = await client.get("/api/v1/properties", params={"location": "bahria"})
    assert [p["title"] for p in response.json()] == ["Bahria apartment"]


async def test_price_range_and_sort(client, inventory):
    response = await client.get(
        "/api/v1/properties", params={"purpose": "rent", "price": "50000-200000", "sort": "price-asc"},
    )

    prices = [p["price"] for p in response.json()]
    assert prices == sorted(prices)
    assert prices == [60000, 95000, 180000]

    descending = await client.get("/api/v1/properties", params={"sort": "price-desc"})
    assert descending.json()[0]["title"] == "Bungalow"


async def test_bad_price_range(client):
    response = await client.get("/api/v1/properties", params={"price": "cheap"})
    assert response.status_code == 400


async def test_featured_only_published(client, inventory):
    response = await client.get("/api/v1/properties/featured")
    assert [p["title"] for p in response.json()] == ["Bahria apartment"]


async def test_detail_with_similar_listings(client, inventory):
    prop = inventory["clifton_rent"]
    response = await client.get(f"/api/v1/properties/{prop['property_id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["property"]["title"] == prop["title"]
    similar = {p["title"] for p in body["similar"]}
    assert similar == {"Flat near Clifton Block 5", "Bahria apartment"}


async def test_draft_detail_is_hidden(client, inventory):
    response = await client.get(f"/api/v1/properties/{inventory['clifton_draft']['property_id']}")
    assert response.status_code == 404


async def test_listing_inquiry_creates_lead(client, admin, inventory):
    prop = inventory["clifton_rent"]
    response = await client.post(
        f"/api/v1/properties/{prop['property_id']}/inquiry",
        json={"name": "Kamran Baig", "mobile": "0333-2221100", "message": "Is it still available?"},
    )

    assert response.status_code == 201, response.text
    lead = (await client.get(f"/api/v1/leads/{response.json()['lead_id']}", headers=admin.headers)).json()
    assert lead["notes"] == "Is it still available?\n\nInterested in: 3 Bed Apartment, Sea View"
    assert lead["interest_types"] == ["apartment"]
    assert lead["locations"] == ["Clifton"]
    assert lead["source"] == "website"


async def test_inquiry_on_draft_listing_is_404(client, inventory):
    response = await client.post(
        f"/api/v1/properties/{inventory['clifton_draft']['property_id']}/inquiry",
        json={"name": "Kamran Baig", "mobile": "03332221100"},
    )
    assert response.status_code == 404


async def test_inventory_lists_all_statuses_with_counts(client, agent, inventory):
    response = await client.get(ADMIN_URL, headers=agent.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["counts"] == {"draft": 1, "review": 0, "published": 5}
    assert len(body["properties"]) == 6

    drafts = await client.get(ADMIN_URL, params={"status": "draft"}, headers=agent.headers)
    assert [p["title"] for p in drafts.json()["properties"]] == ["Unreviewed flat"]

    searched = await client.get(ADMIN_URL, params={"search": "pechs"}, headers=agent.headers)
    assert [p["title"] for p in searched.json()["properties"]] == ["Shahrah-e-Faisal office"]


async def test_inventory_requires_staff(client):
    assert (await client.get(ADMIN_URL)).status_code == 401


async def test_publish_draft(client, agent, inventory):
    draft = inventory["clifton_draft"]
    response = await client.patch(
        f"{ADMIN_URL}/{draft['property_id']}", json={"status": "published", "price": 150000}, headers=agent.headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "published"
    assert response.json()["price"] == 150000
    assert response.json()["title"] == "Unreviewed flat"
    assert (await client.get(f"/api/v1/properties/{draft['property_id']}")).status_code == 200


async def test_update_rejects_null_required_field(client, admin, inventory):
    response = await client.patch(
        f"{ADMIN_URL}/{inventory['office']['property_id']}", json={"title": None}, headers=admin.headers,
    )
    assert response.status_code == 400


async def test_create_defaults_agent_to_creator(client, agent):
    response = await client.post(ADMIN_URL, json=listing(status="review"), headers=agent.headers)

    assert response.status_code == 201
    assert response.json()["agent_id"] == str(agent.agent_id)


async def test_only_admin_deletes_listings(client, admin, agent, inventory):
    url = f"{ADMIN_URL}/{inventory['office']['property_id']}"

    assert (await client.delete(url, headers=agent.headers)).status_code == 403
    assert (await client.delete(url, headers=admin.headers)).status_code == 204
    assert (await client.delete(url, headers=admin.headers)).status_code == 404
