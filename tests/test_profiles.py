import pytest


@pytest.mark.asyncio
async def test_restaurant_profile_upsert(api, client):
    token = (await api.register("restaurant"))["token"]
    headers = api.auth(token)

    r = await client.get("/api/restaurants/profile", headers=headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Restaurant profile not found"

    r = await client.post(
        "/api/restaurants/profile",
        json={"name": "Blue Plate", "address": "12 Elm St", "cuisine_type": "diner"},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Restaurant profile created"
    first_id = r.json()["restaurant"]["id"]

    r = await client.post(
        "/api/restaurants/profile",
        json={"name": "Blue Plate Cafe", "address": "12 Elm St"},
        headers=headers,
    )
    assert r.json()["message"] == "Restaurant profile updated"
    assert r.json()["restaurant"]["id"] == first_id

    r = await client.get("/api/restaurants/profile", headers=headers)
    assert r.json()["restaurant"]["name"] == "Blue Plate Cafe"
    assert r.json()["restaurant"]["cuisine_type"] is None


@pytest.mark.asyncio
async def test_restaurant_profile_requires_name_and_address(api, client):
    token = (await api.register("restaurant"))["token"]
    r = await client.post("/api/restaurants/profile", json={"name": "No Address"}, headers=api.auth(token))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_public_restaurant_directory(api, client):
    await api.restaurant(name="First", email="first@example.com")
    await api.restaurant(name="Second")

    r = await client.get("/api/restaurants/all")
    assert r.status_code == 200
    restaurants = r.json()["restaurants"]
    assert [x["name"] for x in restaurants] == ["Second", "First"]
    assert restaurants[1]["email"] == "first@example.com"

    one = await client.get(f"/api/restaurants/{restaurants[1]['id']}")
    assert one.json()["restaurant"]["name"] == "First"

    missing = await client.get("/api/restaurants/9999")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Restaurant not found"


@pytest.mark.asyncio
async def test_organization_directory_and_type_filter(api, client):
    await api.organization(name="Zeta Pantry", org_type="food_bank")
    await api.organization(name="Alpha Shelter", org_type="shelter")
    await api.organization(name="Beta Shelter", org_type="shelter")

    r = await client.get("/api/organizations/all")
    assert [o["name"] for o in r.json()["organizations"]] == ["Alpha Shelter", "Beta Shelter", "Zeta Pantry"]

    r = await client.get("/api/organizations/type/shelter")
    assert r.json()["type"] == "shelter"
    assert [o["name"] for o in r.json()["organizations"]] == ["Alpha Shelter", "Beta Shelter"]

    org_id = r.json()["organizations"][0]["id"]
    one = await client.get(f"/api/organizations/{org_id}")
    assert one.json()["organization"]["name"] == "Alpha Shelter"
    assert (await client.get("/api/organizations/9999")).status_code == 404


@pytest.mark.asyncio
async def test_organization_profile_requires_type(api, client):
    token = (await api.register("organization"))["token"]
    r = await client.post(
        "/api/organizations/profile",
        json={"name": "Nameless", "address": "1 Road"},
        headers=api.auth(token),
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_volunteer_profile_and_public_listing(api, client):
    token = (await api.register("volunteer"))["token"]
    headers = api.auth(token)
    r = await client.post(
        "/api/volunteers/profile",
        json={
            "availability": "weekends",
            "transportation_type": "bike",
            "emergency_contact_name": "Pat",
            "emergency_contact_phone": "555-0100",
        },
        headers=headers,
    )
    assert r.json()["message"] == "Volunteer profile created"
    assert r.json()["volunteer"]["emergency_contact_name"] == "Pat"

    r = await client.get("/api/volunteers/all")
    volunteers = r.json()["volunteers"]
    assert len(volunteers) == 1
    assert volunteers[0]["transportation_type"] == "bike"
    assert "emergency_contact_phone" not in volunteers[0]
