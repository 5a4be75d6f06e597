# tests/integration/test_catalog_listing.py

from decimal import Decimal

import pytest

from venue_booking.domain.pricing import MealType, PricingUnit, ServingStyle, VenueType


@pytest.fixture
def venues(make_venue):
    dhaka = [
        make_venue(name=f"Dhaka Hall {index}", price_per_hour=Decimal(100 + index * 50))
        for index in range(12)
    ]
    make_venue(name="Garden Pavilion", city="Chittagong", venue_type=VenueType.OUTDOOR)
    make_venue(name="Heritage Hall", city="Rajshahi", is_active=False)
    return dhaka


def test_city_filter_reports_full_total(client, venues):
    response = client.get("/venues", params={"city": "Dhaka", "page": 1, "limit": 10})

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["items"]) == 10
    assert {item["city"] for item in data["items"]} == {"Dhaka"}
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 12, "pages": 2}


def test_city_filter_is_case_insensitive(client, venues):
    response = client.get("/venues", params={"city": "dhaka", "page": 2, "limit": 10})

    data = response.json()["data"]
    assert len(data["items"]) == 2
    assert data["pagination"]["total"] == 12


def test_public_listing_hides_inactive_venues(client, venues):
    response = client.get("/venues", params={"limit": 100})

    names = {item["name"] for item in response.json()["data"]["items"]}
    assert "Heritage Hall" not in names
    assert "Garden Pavilion" in names


def test_admin_listing_includes_inactive_venues(client, venues, organizer):
    response = client.get("/admin/venues", params={"limit": 100}, headers=organizer["headers"])

    names = {item["name"] for item in response.json()["data"]["items"]}
    assert "Heritage Hall" in names


def test_price_filter_and_sort(client, venues):
    response = client.get(
        "/venues",
        params={"minPrice": 300, "maxPrice": 500, "sortBy": "name", "sortOrder": "asc"},
    )

    items = response.json()["data"]["items"]
    prices = [item["pricePerHour"] for item in items]
    assert prices and all(300 <= price <= 500 for price in prices)
    assert [item["name"] for item in items] == sorted(item["name"] for item in items)


def test_search_and_venue_type(client, venues):
    response = client.get("/venues", params={"search": "garden", "venueType": "outdoor"})

    items = response.json()["data"]["items"]
    assert [item["name"] for item in items] == ["Garden Pavilion"]


def test_inactive_venue_detail_is_404(client, make_venue):
    venue = make_venue(is_active=False)

    response = client.get(f"/venues/{venue.id}")

    assert response.status_code == 404


def test_venue_crud_as_organizer(client, organizer):
    payload = {
        "name": "Lakeside Hall",
        "address": "9 Lake Road, Gulshan",
        "city": "Dhaka",
        "state": "Dhaka Division",
        "capacity": 250,
        "venueType": "hybrid",
        "pricingUnit": "day",
        "pricePerDay": 2000,
        "operatingHours": {"monday": {"open": "09:00", "close": "22:00"}},
    }

    created = client.post("/venues", json=payload, headers=organizer["headers"])
    assert created.status_code == 201
    venue = created.json()["data"]["venue"]
    assert venue["pricingUnit"] == PricingUnit.DAY.value
    assert venue["pricePerDay"] == 2000.0

    duplicate = client.post("/venues", json=payload, headers=organizer["headers"])
    assert duplicate.status_code == 409

    updated = client.put(f"/venues/{venue['id']}", json={"capacity": 300}, headers=organizer["headers"])
    assert updated.status_code == 200
    assert updated.json()["data"]["venue"]["capacity"] == 300

    deleted = client.delete(f"/venues/{venue['id']}", headers=organizer["headers"])
    assert deleted.status_code == 200
    assert client.get(f"/venues/{venue['id']}").status_code == 404


def test_venue_requires_rate_for_its_unit(client, organizer):
    response = client.post(
        "/venues",
        json={
            "name": "No Rate Hall",
            "address": "1 Nowhere Street",
            "city": "Dhaka",
            "state": "Dhaka Division",
            "capacity": 100,
            "venueType": "indoor",
            "pricingUnit": "hour",
        },
        headers=organizer["headers"],
    )

    assert response.status_code == 400


def test_customer_cannot_create_venue(client, customer):
    response = client.post("/venues", json={}, headers=customer["headers"])

    assert response.status_code == 403


def test_meal_listing_and_crud(client, organizer, make_meal):
    make_meal()
    make_meal(
        name="International Buffet",
        type=MealType.BUFFET,
        serving_style=ServingStyle.BUFFET,
        price_per_person=Decimal("445.00"),
    )

    listing = client.get("/meals", params={"type": "buffet"})
    assert [item["name"] for item in listing.json()["data"]["items"]] == ["International Buffet"]

    created = client.post(
        "/meals",
        json={
            "name": "Seafood Special",
            "type": "nonveg",
            "servingStyle": "plated",
            "pricePerPerson": 550,
            "minimumGuests": 30,
            "menuItems": ["Grilled Salmon"],
        },
        headers=organizer["headers"],
    )
    assert created.status_code == 201
    meal_id = created.json()["data"]["meal"]["id"]

    updated = client.put(f"/meals/{meal_id}", json={"isPopular": True}, headers=organizer["headers"])
    assert updated.json()["data"]["meal"]["isPopular"] is True

    assert client.delete(f"/meals/{meal_id}", headers=organizer["headers"]).status_code == 200
    assert client.get(f"/meals/{meal_id}").status_code == 404


def test_venue_and_meal_keep_image_urls(client, organizer):
    venue = client.post(
        "/venues",
        json={
            "name": "Gallery Hall",
            "address": "12 Art Lane, Banani",
            "city": "Dhaka",
            "state": "Dhaka Division",
            "capacity": 120,
            "venueType": "indoor",
            "pricePerHour": 300,
            "images": ["https://cdn.example.com/venues/gallery-1.jpg"],
        },
        headers=organizer["headers"],
    ).json()["data"]["venue"]
    assert venue["images"] == ["https://cdn.example.com/venues/gallery-1.jpg"]

    updated = client.put(
        f"/venues/{venue['id']}",
        json={"images": ["https://cdn.example.com/venues/gallery-2.jpg"]},
        headers=organizer["headers"],
    )
    assert updated.status_code == 200
    assert client.get(f"/venues/{venue['id']}").json()["data"]["venue"]["images"] == [
        "https://cdn.example.com/venues/gallery-2.jpg"
    ]

    meal = client.post(
        "/meals",
        json={
            "name": "Tasting Menu",
            "type": "nonveg",
            "servingStyle": "plated",
            "pricePerPerson": 600,
        },
        headers=organizer["headers"],
    ).json()["data"]["meal"]
    assert meal["images"] == []


def test_too_many_images_is_400(client, organizer, make_meal):
    meal = make_meal()
    images = [f"https://cdn.example.com/meals/{n}.jpg" for n in range(11)]

    response = client.put(f"/meals/{meal.id}", json={"images": images}, headers=organizer["headers"])

    assert response.status_code == 400
