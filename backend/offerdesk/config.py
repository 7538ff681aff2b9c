# backend/offerdesk/config.py
from __future__ import annotations
import os

from . import __version__


def _split_origins(raw: str | None) -> set[str]:
    if not raw:
        return {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:4173",
            "http://127.0.0.1:4173",
        }
    return {o.strip() for o in raw.split(",") if o.strip()}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///offerdesk.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Shared secret for PIN-gated operations. Unset means every PIN check fails.
    ADMIN_DELETE_PIN = os.environ.get("ADMIN_DELETE_PIN")

    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get("CORS_ALLOWED_ORIGINS"))

    # None -> <instance_path>/uploads, resolved in create_app
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER")
    PUBLIC_UPLOAD_BASE_URL = os.environ.get("PUBLIC_UPLOAD_BASE_URL", "/uploads")
    MAX_IMAGE_BYTES = 5 * 1024 * 1024
    MAX_CONTENT_LENGTH = 60 * 1024 * 1024

    GEOCODER_BASE_URL = os.environ.get("GEOCODER_BASE_URL", "https://nominatim.openstreetmap.org")
    GEOCODER_USER_AGENT = os.environ.get("GEOCODER_USER_AGENT", f"offerdesk/{__version__}")
    GEOCODER_TIMEOUT = float(os.environ.get("GEOCODER_TIMEOUT", "10"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
