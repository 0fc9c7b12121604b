# smartwash/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Databases ─────────────────────────────────────────────────────────
    # Backing store: catalog, vehicles, transactions, users
    DATABASE_URL: str = "sqlite:///./smartwash.db"
    # Device-local store: offline transaction queue (must survive backing-store outages)
    LOCAL_STORE_URL: str = "sqlite:///./smartwash_local.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to require X-API-Key on every call
    SESSION_TOKEN_TTL_MINUTES: int = 12 * 60

    # ── Business ──────────────────────────────────────────────────────────
    BUSINESS_NAME: str = "Spillway Car Wash"
    CURRENCY_SYMBOL: str = "K"

    # ── Connectivity ──────────────────────────────────────────────────────
    FORCE_OFFLINE: bool = False     # Route every completed transaction to the offline queue

    # ── Plate OCR (Gemini generateContent) ───────────────────────────────
    OCR_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    OCR_API_KEY: Optional[str] = None
    OCR_MODEL: str = "gemini-2.0-flash"
    OCR_TIMEOUT_SECONDS: float = 30.0

    # ── Receipt notifications ─────────────────────────────────────────────
    NOTIFY_BACKEND: str = "whatsapp"          # whatsapp | webhook
    WHATSAPP_BASE_URL: str = "https://wa.me"
    NOTIFY_WEBHOOK_URL: Optional[str] = None
    NOTIFY_TIMEOUT_SECONDS: float = 5.0

    # ── Seed accounts (used by scripts/setup/init_db.py) ──────────────────
    SEED_ADMIN_EMAIL: str = "admin@smartwash.com"
    SEED_ADMIN_PASSWORD: str = "CHANGE_ME_ADMIN"
    SEED_ATTENDANT_EMAIL: str = "attendant@smartwash.com"
    SEED_ATTENDANT_PASSWORD: str = "CHANGE_ME_ATTENDANT"

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
