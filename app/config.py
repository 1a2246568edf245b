"""ADBOARD — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Storage ──
    storage_backend: str = "local"  # local | supabase
    storage_dir: str = "./storage"
    storage_bucket: str = "documents"
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    max_upload_mb: int = 10
    allowed_file_types: str = ".pdf,.doc,.docx,.xls,.xlsx,.csv,.png,.jpg,.jpeg"

    # ── App ──
    log_level: str = "INFO"
    default_theme: str = "system"  # dark | light | system
    cors_origins: str = "*"

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/adboard.db"
        return "sqlite:///./adboard.db"

    @property
    def allowed_extensions(self) -> list[str]:
        """Allowed upload extensions, lower-cased with leading dot."""
        exts = []
        for ext in self.allowed_file_types.split(","):
            ext = ext.strip().lower()
            if not ext:
                continue
            exts.append(ext if ext.startswith(".") else f".{ext}")
        return exts

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
