import pytest


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["restaurant", "organization", "volunteer"])
async def test_dashboard_requires_profile(api, client, role):
    token = (await api.register(role))["token"]
    r = await client.get(f"/api/dashboard/{role}", headers=api.auth(token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_dashboard_is_role_scoped(api, client):
    token = await api.organization()
    r = await client.get("/api/dashboard/restaurant", headers=api.auth(token))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_dashboards_after_a_day_of_donations(api, client):
    restaurant = await api.restaurant(name="Harbor Grill")
    org = await api.organization(name="Meals Now")
    other_org = await api.organization(name="Second Helping")
    volunteer = await api.volunteer()

    fish = await api.listing(restaurant, title="Fish", quantity=10)
    rice = await api.listing(restaurant, title="Rice", quantity=20)
    await api.listing(restaurant, title="Bread", quantity=5)

    fish_claim = (await api.claim(org, fish["id"], quantity=10, pickup_hours=2)).json()["claim"]
    rice_claim = (await api.claim(org, rice["id"], quantity=8, pickup_hours=2.5)).json()["claim"]
    await api.claim(other_org, rice["id"], quantity=4)

    await api.set_status(restaurant, fish_claim["id"], "approved")
    await api.set_status(restaurant, rice_claim["id"], "approved")
    await client.post(f"/api/volunteers/signup/{fish_claim['id']}", headers=api.auth(volunteer))
    await client.post(f"/api/volunteers/signup/{rice_claim['id']}", headers=api.auth(volunteer))
    await client.put(f"/api/volunteers/assignments/{fish_claim['id']}/complete", headers=api.auth(volunteer))

    r = await client.get("/api/dashboard/restaurant", headers=api.auth(restaurant))
    assert r.status_code == 200
    d = r.json()["dashboard"]
    assert d["total_listings"] == 3
    assert d["active_listings"] == 1
    assert d["total_claims"] == 3
    assert d["pending_claims"] == 1
    assert d["total_servings_donated"] == 18
    assert len(d["recent_claims"]) == 3
    assert d["recent_claims"][0]["organization_name"] == "Second Helping"

    r = await client.get("/api/dashboard/organization", headers=api.auth(org))
    d = r.json()["dashboard"]
    assert d["total_claims"] == 2
    assert d["approved_claims"] == 1
    assert d["completed_pickups"] == 1
    assert d["total_servings_received"] == 18
    assert [c["id"] for c in d["upcoming_pickups"]] == [rice_claim["id"]]

    r = await client.get("/api/dashboard/volunteer", headers=api.auth(volunteer))
    d = r.json()["dashboard"]
    assert d["total_assignments"] == 2
    assert d["completed_deliveries"] == 1
    assert d["total_servings_delivered"] == 18
    assert [c["id"] for c in d["upcoming_assignments"]] == [fish_claim["id"], rice_claim["id"]]

    r = await client.get("/api/dashboard/overview", headers=api.auth(volunteer))
    o = r.json()["platform_overview"]
    assert o["total_users"] == {"restaurants": 1, "organizations": 2, "volunteers": 1, "total": 4}
    assert o["total_food_listings"] == 3
    assert o["total_servings_available"] == 35
    assert o["servings_distributed"] == 18
    assert o["food_waste_saved"] == 10
    assert [l["title"] for l in o["recent_listings"]] == ["Bread", "Rice", "Fish"]
    assert o["recent_listings"][0]["restaurant_name"] == "Harbor Grill"


@pytest.mark.asyncio
async def test_recent_claims_capped_at_five(api, client):
    restaurant = await api.restaurant()
    listing = await api.listing(restaurant, quantity=100)
    for i in range(7):
        org = await api.organization(name=f"Org {i}")
        await api.claim(org, listing["id"], quantity=1)

    r = await client.get("/api/dashboard/restaurant", headers=api.auth(restaurant))
    d = r.json()["dashboard"]
    assert d["total_claims"] == 7
    assert len(d["recent_claims"]) == 5
    assert d["recent_claims"][0]["organization_name"] == "Org 6"


@pytest.mark.asyncio
async def test_overview_on_empty_platform(api, client):
    token = (await api.register("volunteer"))["token"]
    r = await client.get("/api/dashboard/overview", headers=api.auth(token))
    o = r.json()["platform_overview"]
    assert o["total_users"]["total"] == 1
    assert o["total_food_listings"] == 0
    assert o["servings_distributed"] == 0
    assert o["recent_listings"] == []
