# Overview: JSON envelope helpers shared by every blueprint.

from __future__ import annotations

from typing import Any

from flask import jsonify


def success_response(data: Any = None, message: str | None = None, status: int = 200, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def error_response(error: str, status: int = 400):
    return jsonify({"success": False, "error": error}), status


def internal_error():
    return error_response("Internal server error", 500)
