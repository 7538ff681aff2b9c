# Overview: Shared admin PIN check for destructive and direct-set operations.

from __future__ import annotations

import hmac

from flask import current_app


class PinRejectedError(Exception):
    """403-level: the supplied admin PIN is missing or wrong."""


class PinGate:
    """
    Equality check of a caller-supplied PIN against one configured secret.

    The secret is injected at construction (create_app reads ADMIN_DELETE_PIN
    from config); an unset or blank secret rejects every PIN.
    """

    def __init__(self, secret: str | int | None):
        self._secret = str(secret).strip() if secret is not None else ""

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def check(self, supplied) -> bool:
        if not self._secret or supplied is None:
            return False
        candidate = str(supplied).strip()
        if not candidate:
            return False
        return hmac.compare_digest(candidate.encode(), self._secret.encode())

    def require(self, supplied) -> None:
        if not self.check(supplied):
            raise PinRejectedError("Invalid PIN")


def get_pin_gate() -> PinGate:
    return current_app.extensions["pin_gate"]
