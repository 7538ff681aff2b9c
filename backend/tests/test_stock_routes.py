"""
Regular stock ledger over HTTP.

Verifies:
- add increases quantity and appends one matching history row
- update requires the admin PIN and leaves nothing behind when it is wrong
- reason_type "other" needs a note on every mutating path
- threshold changes never touch quantity or history
"""

import pytest

from offerdesk.extensions import db
from offerdesk.models import StockHistory, StockRecord

from conftest import ADMIN_PIN, WRONG_PIN


def _stock(product_id):
    db.session.expire_all()
    return db.session.query(StockRecord).filter_by(product_id=product_id).one()


class TestAddStock:

    def test_add_shipment_returns_new_quantity(self, client, product):
        resp = client.post(f"/api/stock/{product.id}/add", json={"quantity": 50, "reason_type": "new_shipment"})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["quantity"] == 150

    def test_add_shows_up_in_history(self, client, product):
        client.post(f"/api/stock/{product.id}/add", json={"quantity": 50, "reason_type": "new_shipment"})

        resp = client.get(f"/api/stock/history/{product.id}")
        entries = resp.get_json()["data"]
        assert len(entries) == 1
        entry = entries[0]
        assert entry["previous_quantity"] == 100
        assert entry["new_quantity"] == 150
        assert entry["change_amount"] == 50
        assert entry["action_type"] == "addition"
        assert entry["reason_type"] == "new_shipment"
        assert entry["admin_pin_used"] is False

    @pytest.mark.parametrize("delta", [1, 7, 250])
    def test_history_delta_matches_quantity(self, client, product, delta):
        client.post(f"/api/stock/{product.id}/add", json={"quantity": delta, "reason_type": "returns"})

        entry = db.session.query(StockHistory).filter_by(product_id=product.id).one()
        assert entry.new_quantity == entry.previous_quantity + delta
        assert entry.change_amount == delta
        assert _stock(product.id).quantity == 100 + delta

    @pytest.mark.parametrize("quantity", [0, -5, None, "abc", 2.5])
    def test_rejects_non_positive_or_malformed_quantity(self, client, product, quantity):
        resp = client.post(f"/api/stock/{product.id}/add", json={"quantity": quantity, "reason_type": "new_shipment"})

        assert resp.status_code == 400
        assert resp.get_json()["success"] is False
        assert _stock(product.id).quantity == 100

    def test_unknown_product_is_404(self, client, db_session):
        resp = client.post("/api/stock/9999/add", json={"quantity": 5, "reason_type": "new_shipment"})
        assert resp.status_code == 404

    def test_invalid_reason_type(self, client, product):
        resp = client.post(f"/api/stock/{product.id}/add", json={"quantity": 5, "reason_type": "gift"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid reason type"


class TestUpdateStock:

    def test_update_with_pin_sets_absolute_value(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": 40, "reason_type": "other", "reason_note": "Cycle count", "admin_pin": ADMIN_PIN},
        )

        assert resp.status_code == 200
        assert resp.get_json()["data"]["quantity"] == 40

        entry = db.session.query(StockHistory).filter_by(product_id=product.id).one()
        assert entry.action_type == "update"
        assert entry.previous_quantity == 100
        assert entry.change_amount == -60
        assert entry.admin_pin_used is True
        assert entry.reason_note == "Cycle count"

    def test_wrong_pin_is_forbidden_and_changes_nothing(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": 5, "reason_type": "other", "admin_pin": WRONG_PIN},
        )

        assert resp.status_code == 403
        assert _stock(product.id).quantity == 100
        assert db.session.query(StockHistory).count() == 0

    @pytest.mark.parametrize("payload", [
        {"quantity": 5, "reason_type": "new_shipment"},
        {"quantity": 5, "reason_type": "new_shipment", "admin_pin": ""},
        {"quantity": 5, "reason_type": "new_shipment", "admin_pin": None},
    ])
    def test_missing_pin_is_forbidden(self, client, product, payload):
        resp = client.put(f"/api/stock/{product.id}/update", json=payload)

        assert resp.status_code == 403
        assert _stock(product.id).quantity == 100

    def test_negative_target_rejected(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": -1, "reason_type": "returns", "admin_pin": ADMIN_PIN},
        )
        assert resp.status_code == 400

    def test_zero_target_allowed(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": 0, "reason_type": "returns", "admin_pin": ADMIN_PIN},
        )
        assert resp.status_code == 200
        assert _stock(product.id).quantity == 0


class TestReasonNote:

    @pytest.mark.parametrize("note", [None, "", "   "])
    def test_other_without_note_rejected_on_add(self, client, product, note):
        resp = client.post(
            f"/api/stock/{product.id}/add",
            json={"quantity": 5, "reason_type": "other", "reason_note": note},
        )

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Reason note is required for 'other' type"
        assert _stock(product.id).quantity == 100

    def test_other_without_note_rejected_on_update(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": 5, "reason_type": "other", "admin_pin": ADMIN_PIN},
        )

        assert resp.status_code == 400
        assert _stock(product.id).quantity == 100


class TestStockReads:

    def test_list_includes_product_and_low_stock_flag(self, client, make_product):
        make_product(name="Low", stock=10, threshold=20)
        make_product(name="High", stock=500)

        rows = client.get("/api/stock").get_json()["data"]
        by_name = {r["product"]["product_name"]: r for r in rows}
        assert by_name["Low"]["is_low_stock"] is True
        assert by_name["High"]["is_low_stock"] is False
        assert by_name["Low"]["product"]["company"]["company_name"] == "Parle Agro"

    def test_get_missing_ledger_is_404(self, client, db_session):
        resp = client.get("/api/stock/product/12345")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Product stock not found"

    def test_history_all_products_newest_first(self, client, make_product):
        a = make_product(name="A", stock=1)
        b = make_product(name="B", stock=1)
        client.post(f"/api/stock/{a.id}/add", json={"quantity": 1, "reason_type": "returns"})
        client.post(f"/api/stock/{b.id}/add", json={"quantity": 2, "reason_type": "returns"})

        entries = client.get("/api/stock/history").get_json()["data"]
        assert [e["product_id"] for e in entries] == [b.id, a.id]
        assert entries[0]["product"]["product_name"] == "B"


class TestThreshold:

    def test_threshold_update_leaves_quantity_and_history(self, client, product):
        resp = client.put(f"/api/stock/{product.id}/threshold", json={"low_stock_threshold": 120})

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["low_stock_threshold"] == 120
        assert data["quantity"] == 100
        assert data["is_low_stock"] is True
        assert db.session.query(StockHistory).count() == 0

    def test_negative_threshold_rejected(self, client, product):
        resp = client.put(f"/api/stock/{product.id}/threshold", json={"low_stock_threshold": -3})
        assert resp.status_code == 400
