"""
Admin PIN gate.
"""

import logging

import pytest

from offerdesk import create_app
from offerdesk.services.pin_service import PinGate, PinRejectedError


class TestPinGate:

    def test_matches_configured_secret(self):
        gate = PinGate("4321")
        assert gate.check("4321") is True
        assert gate.check(" 4321 ") is True
        assert gate.check(4321) is True

    @pytest.mark.parametrize("supplied", [None, "", "   ", "1234", "43210"])
    def test_rejects_everything_else(self, supplied):
        assert PinGate("4321").check(supplied) is False

    @pytest.mark.parametrize("secret", [None, "", "  "])
    def test_unconfigured_gate_denies(self, secret):
        gate = PinGate(secret)
        assert gate.configured is False
        assert gate.check("") is False
        assert gate.check("4321") is False

    def test_require_raises(self):
        with pytest.raises(PinRejectedError):
            PinGate("4321").require("0000")
        PinGate("4321").require("4321")

    def test_app_uses_injected_secret(self, app):
        gate = app.extensions["pin_gate"]
        assert gate.configured
        assert gate.check("4321")

    def test_pin_accepted_from_form_fields(self, client, company):
        resp = client.delete(f"/api/companies/{company.id}", data={"pin": "4321"})
        assert resp.status_code == 200

    def test_unset_secret_warns_at_startup(self, caplog, tmp_path):
        with caplog.at_level(logging.WARNING):
            app = create_app({
                'TESTING': True,
                'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
                'ADMIN_DELETE_PIN': '',
                'UPLOAD_FOLDER': str(tmp_path),
            })

        assert app.extensions["pin_gate"].configured is False
        assert "ADMIN_DELETE_PIN is not set" in caplog.text

    def test_rejected_pin_maps_to_403(self, client, product):
        resp = client.put(
            f"/api/stock/{product.id}/update",
            json={"quantity": 1, "reason_type": "returns", "admin_pin": " "},
        )
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Invalid PIN"
