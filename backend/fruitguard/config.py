"""Runtime configuration resolved from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_GATEWAY_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-flash"

_TRUTHY = {"1", "true", "yes", "on"}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _split_origins(raw_value: Optional[str]) -> List[str]:
    if not raw_value:
        return ["*"]
    origins = [item.strip() for item in raw_value.split(",") if item.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Settings:
    """Values the relay needs for one invocation.

    The upstream credential is optional here on purpose: a missing key is
    reported per request as a ``Misconfigured`` failure instead of preventing
    the service from starting.
    """

    gateway_api_key: Optional[str] = None
    gateway_base_url: str = DEFAULT_GATEWAY_BASE_URL
    gateway_model: str = DEFAULT_GATEWAY_MODEL
    relay_auth_token: Optional[str] = None
    strict_result_validation: bool = False
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    samples_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        samples_file = _clean(os.getenv("SAMPLES_FILE"))
        return cls(
            gateway_api_key=_clean(os.getenv("AI_GATEWAY_API_KEY")),
            gateway_base_url=_clean(os.getenv("AI_GATEWAY_BASE_URL")) or DEFAULT_GATEWAY_BASE_URL,
            gateway_model=_clean(os.getenv("AI_GATEWAY_MODEL")) or DEFAULT_GATEWAY_MODEL,
            relay_auth_token=_clean(os.getenv("RELAY_AUTH_TOKEN")),
            strict_result_validation=(
                os.getenv("STRICT_RESULT_VALIDATION", "").strip().lower() in _TRUTHY
            ),
            cors_allow_origins=_split_origins(os.getenv("CORS_ALLOW_ORIGINS")),
            samples_file=Path(samples_file) if samples_file else None,
        )


def get_settings() -> Settings:
    """FastAPI dependency returning settings for the current request."""
    return Settings.from_env()
