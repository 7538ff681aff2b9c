"""
Offer creation, activation check, overlap warnings, toggle and delete.
"""

import pytest

from offerdesk.extensions import db
from offerdesk.models import Offer, OfferPool, OfferPoolHistory
from offerdesk.services import offer_pool_service


def _post_offer(client, **payload):
    return client.post("/api/offers", json=payload)


class TestCreateFreeItemOffer:

    def test_different_product_without_free_stock_stored_inactive(self, client, make_product):
        bought = make_product(name="Hide & Seek 100g", free_stock=50)
        gift = make_product(name="Frooti 200ml", free_stock=0)

        resp = _post_offer(
            client,
            offer_type="free_item",
            product_id=bought.id,
            free_item_type="different_product",
            free_item_product_id=gift.id,
            free_item_quantity=2,
            is_active=True,
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["data"]["is_active"] is False
        assert body["message"].startswith("Offer saved as inactive")

        db.session.expire_all()
        stored = db.session.get(Offer, body["data"]["id"])
        assert stored.is_active is False

    def test_same_product_with_free_stock_is_active(self, client, make_product):
        product = make_product(free_stock=10)

        resp = _post_offer(client, offer_type="free_item", product_id=product.id, free_item_type="same_product")

        body = resp.get_json()
        assert body["data"]["is_active"] is True
        assert body["message"] == "Offer added successfully"

    def test_free_item_offer_gets_one_pool(self, client, make_product):
        bought = make_product(name="Bourbon")
        gift = make_product(name="Frooti", free_stock=3)

        body = _post_offer(
            client,
            offer_type="free_item",
            product_id=bought.id,
            free_item_type="different_product",
            free_item_product_id=gift.id,
        ).get_json()

        pool = db.session.query(OfferPool).filter_by(offer_id=body["data"]["id"]).one()
        assert body["data"]["offer_pool_id"] == pool.id
        assert pool.product_id == gift.id
        assert pool.accumulated_quantity == 0

    def test_external_offer_always_eligible(self, client, product, external_item):
        body = _post_offer(
            client,
            offer_type="free_item",
            product_id=product.id,
            free_item_type="external",
            external_item_id=external_item.id,
        ).get_json()

        assert body["data"]["is_active"] is True
        assert body["data"]["free_item_external_name"] == "Steel tumbler"
        assert body["data"]["free_item_external_description"] == "Branded 250ml tumbler"

        pool = db.session.query(OfferPool).filter_by(offer_id=body["data"]["id"]).one()
        assert pool.product_id is None

    def test_requested_inactive_stays_inactive(self, client, make_product):
        product = make_product(free_stock=10)

        body = _post_offer(
            client, offer_type="free_item", product_id=product.id, free_item_type="same_product", is_active=False
        ).get_json()

        assert body["data"]["is_active"] is False
        assert body["message"] == "Offer added successfully"

    @pytest.mark.parametrize("payload,error", [
        ({"offer_type": "bogof"}, "offer_type must be one of free_item, discount"),
        ({"offer_type": "free_item", "free_item_type": "same_product"}, "Either product_id or company_id is required"),
        ({"offer_type": "free_item", "product_id": 999999, "free_item_type": "same_product"}, "Product not found"),
    ])
    def test_invalid_payloads(self, client, db_session, payload, error):
        resp = _post_offer(client, **payload)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == error
        assert db.session.query(Offer).count() == 0

    def test_different_product_requires_target(self, client, product):
        resp = _post_offer(client, offer_type="free_item", product_id=product.id, free_item_type="different_product")

        assert resp.status_code == 400
        assert db.session.query(OfferPool).count() == 0


class TestCreateDiscountOffer:

    def test_percentage_discount(self, client, product):
        body = _post_offer(
            client,
            offer_type="discount",
            product_id=product.id,
            discount_type="percentage",
            discount_value="12.5",
            min_product_mrp="100",
        ).get_json()

        assert body["data"]["is_active"] is True
        assert body["data"]["discount_value"] == 12.5
        assert body["data"]["offer_pool_id"] is None

    @pytest.mark.parametrize("discount_type,value", [("percentage", 101), ("fixed", 0), ("flat", 5)])
    def test_invalid_discounts(self, client, product, discount_type, value):
        resp = _post_offer(
            client, offer_type="discount", product_id=product.id, discount_type=discount_type, discount_value=value
        )
        assert resp.status_code == 400

    def test_company_wide_discount(self, client, company):
        body = _post_offer(
            client, offer_type="discount", company_id=company.id, discount_type="fixed", discount_value=5
        ).get_json()

        assert body["data"]["product_id"] is None
        assert body["data"]["company_id"] == company.id
        assert body["data"]["company_name"] == "Parle Agro"


class TestOverlaps:

    def test_lists_active_offers_for_product(self, client, make_product):
        product = make_product(free_stock=5)
        first = _post_offer(
            client, offer_type="discount", product_id=product.id, discount_type="fixed", discount_value=2
        ).get_json()

        second = _post_offer(
            client, offer_type="free_item", product_id=product.id, free_item_type="same_product", min_product_weight="1"
        ).get_json()

        assert [o["id"] for o in second["overlaps"]] == [first["data"]["id"]]
        assert second["overlaps"][0]["discount_description"] == "Rs. 2 off"

    def test_check_overlaps_covers_free_item_and_company_wide(self, client, company, make_product):
        product = make_product(name="Frooti", free_stock=5)
        other = make_product(name="Bourbon")

        gives_away = _post_offer(
            client,
            offer_type="free_item",
            product_id=other.id,
            free_item_type="different_product",
            free_item_product_id=product.id,
        ).get_json()["data"]
        company_wide = _post_offer(
            client, offer_type="discount", company_id=company.id, discount_type="percentage", discount_value=5
        ).get_json()["data"]
        _post_offer(
            client,
            offer_type="discount",
            product_id=product.id,
            discount_type="fixed",
            discount_value=1,
            is_active=False,
        )

        resp = client.get(f"/api/offers/check-overlaps/{product.id}")

        body = resp.get_json()
        assert body["has_overlaps"] is True
        roles = {o["id"]: o["role"] for o in body["data"]}
        assert roles == {gives_away["id"]: "free_item", company_wide["id"]: "primary"}
        assert next(o for o in body["data"] if o["id"] == gives_away["id"])["free_item_description"] == "1 x Frooti free"

    def test_no_overlaps(self, client, product):
        body = client.get(f"/api/offers/check-overlaps/{product.id}").get_json()
        assert body["data"] == []
        assert body["has_overlaps"] is False

    def test_unknown_product_is_404(self, client, db_session):
        assert client.get("/api/offers/check-overlaps/8080").status_code == 404


class TestToggleAndDelete:

    def test_toggle_does_not_recheck_stock(self, client, make_product):
        product = make_product(free_stock=0)
        offer = _post_offer(
            client, offer_type="free_item", product_id=product.id, free_item_type="same_product"
        ).get_json()["data"]

        resp = client.put(f"/api/offers/{offer['id']}", json={"is_active": True})

        assert resp.status_code == 200
        assert resp.get_json()["data"]["is_active"] is True
        assert resp.get_json()["message"] == "Offer activated successfully"

    def test_toggle_requires_flag(self, client, product):
        offer = _post_offer(
            client, offer_type="discount", product_id=product.id, discount_type="fixed", discount_value=1
        ).get_json()["data"]

        resp = client.put(f"/api/offers/{offer['id']}", json={})
        assert resp.status_code == 400

    def test_delete_removes_pool_and_history(self, app, client, make_product):
        product = make_product(free_stock=5)
        offer = _post_offer(
            client, offer_type="free_item", product_id=product.id, free_item_type="same_product"
        ).get_json()["data"]
        offer_pool_service.accumulate(offer["offer_pool_id"], 3)

        resp = client.delete(f"/api/offers/{offer['id']}")

        assert resp.status_code == 200
        db.session.expire_all()
        assert db.session.query(Offer).count() == 0
        assert db.session.query(OfferPool).count() == 0
        assert db.session.query(OfferPoolHistory).count() == 0

    def test_list_newest_first(self, client, product):
        ids = [
            _post_offer(
                client, offer_type="discount", product_id=product.id, discount_type="fixed", discount_value=v
            ).get_json()["data"]["id"]
            for v in (1, 2, 3)
        ]

        listed = [o["id"] for o in client.get("/api/offers").get_json()["data"]]
        assert listed == list(reversed(ids))

    def test_has_offer_derived_from_active_offers(self, client, product):
        assert client.get(f"/api/products/{product.id}").get_json()["data"]["has_offer"] is False

        offer = _post_offer(
            client, offer_type="discount", product_id=product.id, discount_type="fixed", discount_value=1
        ).get_json()["data"]
        assert client.get(f"/api/products/{product.id}").get_json()["data"]["has_offer"] is True

        client.put(f"/api/offers/{offer['id']}", json={"is_active": False})
        assert client.get(f"/api/products/{product.id}").get_json()["data"]["has_offer"] is False
