# backend/offerdesk/routes/system.py
"""
System endpoints: liveness, health and uploaded-file serving.
"""

import os
import time

from flask import Blueprint, abort, current_app, send_from_directory
from sqlalchemy import text

from .. import __version__
from ..extensions import db
from ..models import Company, Product, Offer
from ..services.storage_service import BUCKETS, get_image_store
from offerdesk.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Round-trip the database and count the core catalog tables."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        details = {
            "companies": db.session.query(Company).count(),
            "products": db.session.query(Product).count(),
            "offers": db.session.query(Offer).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2), "details": details}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


def check_upload_storage_health() -> dict:
    root = get_image_store().root
    if os.path.isdir(root) and not os.access(root, os.W_OK):
        return {"status": "degraded", "warning": "Upload folder is not writable"}
    return {"status": "healthy", "details": {"upload_folder": root}}


@system_bp.get("/api/test")
def test_route():
    return {"success": True, "message": "Backend is working!"}


@system_bp.get("/health")
def health():
    """
    Health check.

    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    database_health = check_database_health()
    storage_health = check_upload_storage_health()

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    elif storage_health["status"] == "degraded":
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "version": __version__,
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"database": database_health, "upload_storage": storage_health},
    }, http_status


@system_bp.get("/uploads/<bucket>/<path:filename>")
def uploaded_file(bucket: str, filename: str):
    if bucket not in BUCKETS:
        abort(404)
    return send_from_directory(get_image_store().bucket_path(bucket), filename)
