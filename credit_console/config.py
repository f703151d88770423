# credit_console/config.py
from __future__ import annotations

import os
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT_MS = 15000


class ConsoleConfig(BaseModel):
    """Connection settings for the scoring backend.

    Accepts either the snake_case names or the ``baseUrl`` / ``timeoutMs``
    aliases. Anything else is rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    base_url: str = Field(default=DEFAULT_BASE_URL, alias="baseUrl")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, alias="timeoutMs", gt=0)

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if not v:
            raise ValueError("base_url must not be empty")
        return v

    @property
    def timeout_secs(self) -> float:
        return self.timeout_ms / 1000.0

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @classmethod
    def from_env(cls) -> "ConsoleConfig":
        return cls(
            base_url=os.getenv("CONSOLE_BASE_URL", DEFAULT_BASE_URL),
            timeout_ms=int(os.getenv("CONSOLE_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
        )
