"""
Customer signup validation, proximity search and the geocoding proxy.
"""

import httpx
import pytest

from offerdesk.services.customer_service import distance_meters
from offerdesk.services.geocoding_service import Geocoder


def _customer(**overrides):
    payload = {
        "customer_name": "Ramesh Patil",
        "business_name": "Patil Kirana Stores",
        "contact_number": " 98765-43210 ",
        "street_address": "12 Station Road, Dadar",
        "latitude": 19.0186,
        "longitude": 72.8424,
        "gst_number": "27aapfu0939f1zv",
        "food_licence_number": "11521998000123",
        "email": "Ramesh@Example.com",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def geocoder_stub(app, monkeypatch):
    """Swap the registered geocoder for one backed by httpx.MockTransport."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path == "/search":
            if request.url.params["q"] == "explode":
                return httpx.Response(500)
            return httpx.Response(200, json=[
                {"display_name": "Dadar, Mumbai", "lat": "19.0178", "lon": "72.8478"},
            ])
        if request.url.params["lat"] == "0.0":
            return httpx.Response(200, json={"error": "Unable to geocode"})
        return httpx.Response(200, json={"display_name": "Dadar West, Mumbai", "lat": "19.02", "lon": "72.84"})

    geocoder = Geocoder("https://geocoder.test", "offerdesk-tests", transport=httpx.MockTransport(handler))
    monkeypatch.setitem(app.extensions, "geocoder", geocoder)
    return calls


class TestCustomerSignup:

    def test_normalises_fields(self, client, db_session):
        resp = client.post("/api/customers", json=_customer())

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["gst_number"] == "27AAPFU0939F1ZV"
        assert data["contact_number"] == "98765-43210"
        assert data["email"] == "ramesh@example.com"

    @pytest.mark.parametrize("overrides,error", [
        ({"gst_number": "27AAPFU0939F1Z"}, "Invalid GST number format"),
        ({"contact_number": "12345"}, "Invalid contact number. Enter a 10-digit Indian mobile number"),
        ({"contact_number": "5876543210"}, "Invalid contact number. Enter a 10-digit Indian mobile number"),
        ({"contact_number": "+91 98765 43210"}, "Invalid contact number. Enter a 10-digit Indian mobile number"),
        ({"business_name": ""}, "All required fields must be filled"),
        ({"latitude": 123}, "latitude is out of range"),
    ])
    def test_validation(self, client, db_session, overrides, error):
        resp = client.post("/api/customers", json=_customer(**overrides))

        assert resp.status_code == 400
        assert resp.get_json()["error"] == error

    @pytest.mark.parametrize("field,value,error", [
        ("gst_number", "27AAPFU0939F1ZV", "GST number already registered"),
        ("food_licence_number", "11521998000123", "Food licence number already registered"),
        ("email", "RAMESH@example.com", "Email already registered"),
    ])
    def test_duplicates_rejected_per_field(self, client, db_session, field, value, error):
        client.post("/api/customers", json=_customer())

        fresh = _customer(
            gst_number="29ABCDE1234F1Z5",
            food_licence_number="99999999999999",
            email="other@example.com",
        )
        fresh[field] = value
        resp = client.post("/api/customers", json=fresh)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == error


class TestNearby:

    def test_sorted_by_distance_within_radius(self, client, db_session):
        client.post("/api/customers", json=_customer())
        client.post("/api/customers", json=_customer(
            business_name="Near Mart",
            gst_number="29ABCDE1234F1Z5",
            food_licence_number="2",
            email=None,
            latitude=19.0180,
            longitude=72.8430,
        ))
        client.post("/api/customers", json=_customer(
            business_name="Pune Traders",
            gst_number="27ABCDE1234F1Z5",
            food_licence_number="3",
            email=None,
            latitude=18.5204,
            longitude=73.8567,
        ))

        resp = client.get("/api/customers/nearby?latitude=19.0179&longitude=72.8431")

        rows = resp.get_json()["data"]
        assert [r["business_name"] for r in rows] == ["Near Mart", "Patil Kirana Stores"]
        assert rows[0]["distance_meters"] < rows[1]["distance_meters"] <= 5000

    def test_radius_must_be_positive(self, client, db_session):
        resp = client.get("/api/customers/nearby?latitude=19&longitude=72&radius=0")
        assert resp.status_code == 400

    def test_distance_meters(self):
        # Mumbai CST to Pune station, roughly 120 km
        assert 115_000 < distance_meters(18.9402, 72.8356, 18.5289, 73.8744) < 125_000
        assert distance_meters(10, 10, 10, 10) == 0


class TestGeocoding:

    def test_search(self, client, geocoder_stub):
        resp = client.get("/api/customers/geocode?q=Dadar")

        assert resp.status_code == 200
        assert resp.get_json()["data"] == [
            {"display_name": "Dadar, Mumbai", "latitude": 19.0178, "longitude": 72.8478},
        ]
        sent = geocoder_stub[0]
        assert sent.url.params["format"] == "jsonv2"
        assert sent.url.params["countrycodes"] == "in"
        assert sent.headers["User-Agent"] == "offerdesk-tests"

    def test_query_required(self, client, geocoder_stub):
        assert client.get("/api/customers/geocode?q=").status_code == 400
        assert geocoder_stub == []

    def test_upstream_failure_is_502(self, client, geocoder_stub):
        resp = client.get("/api/customers/geocode?q=explode")
        assert resp.status_code == 502

    def test_reverse(self, client, geocoder_stub):
        resp = client.get("/api/customers/reverse-geocode?lat=19.02&lng=72.84")

        assert resp.get_json()["data"]["display_name"] == "Dadar West, Mumbai"

    def test_reverse_no_match_is_404(self, client, geocoder_stub):
        resp = client.get("/api/customers/reverse-geocode?lat=0&lng=0")
        assert resp.status_code == 404

    def test_reverse_requires_numbers(self, client, geocoder_stub):
        assert client.get("/api/customers/reverse-geocode?lat=abc&lng=1").status_code == 400
