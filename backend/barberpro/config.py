# backend/barberpro/config.py
from __future__ import annotations
import os
from dataclasses import dataclass


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process unless DATABASE_URL points elsewhere
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///barberpro.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Absolute lifetime of a bearer token issued by /api/auth/login
    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "12"))

    # Browser origins allowed to call the API (comma separated)
    CORS_ORIGINS = os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    )


@dataclass
class SyncConfig:
    """Client data layer settings with environment variable overrides."""
    api_base_url: str = os.environ.get("BARBERPRO_API_URL", "http://127.0.0.1:3001")

    # One snapshot file per device, shared by every tenant that signs in on it
    store_path: str = os.environ.get("BARBERPRO_STORE_PATH", "barberpro_local.db")

    request_timeout: float = float(os.environ.get("BARBERPRO_REQUEST_TIMEOUT", "10"))

    # False switches post-mutation resync to patching the one changed entity
    full_refresh_after_mutation: bool = os.environ.get(
        "BARBERPRO_FULL_REFRESH", "true"
    ).lower() == "true"
