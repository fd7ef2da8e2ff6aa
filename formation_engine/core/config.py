from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    FORMATION_CONFIG_DIR: str = os.getenv("FORMATION_CONFIG_DIR", "config/workflows")
    DEFAULT_FREEZONE: str = os.getenv("DEFAULT_FREEZONE", "IFZA")

    # Direct-upload target handed to clients; issuing signed URLs is the host's job
    STORAGE_URL: str = os.getenv("STORAGE_URL", "")
    UPLOAD_BUCKET: str = os.getenv("UPLOAD_BUCKET", "documents")
    UPLOAD_URL_TTL_MIN: int = int(os.getenv("UPLOAD_URL_TTL_MIN", "60"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
