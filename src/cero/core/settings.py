from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() == "on"


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def state_dir() -> Path:
    configured = os.getenv("CERO_STATE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cero"


@dataclass(frozen=True)
class LLMSettings:
    provider: str
    url: str
    model: str
    api_key: str | None
    timeout_s: float
    temperature: float
    max_tokens: int

    @property
    def is_configured(self) -> bool:
        return self.provider != "off" and bool(self.url and self.model)


@dataclass(frozen=True)
class GoogleSettings:
    token_path: Path
    client_id: str | None
    client_secret: str | None
    token_uri: str
    calendar_id: str
    timezone: str


@dataclass(frozen=True)
class CeroSettings:
    state_dir: Path
    llm: LLMSettings
    google: GoogleSettings
    turn_timeout_s: float
    stream_frame_delay_s: float
    stream_model_name: str
    default_identity: str
    tasks_enabled: bool
    credential_store: str
    cors_origins: list[str]


def load_settings() -> CeroSettings:
    root = state_dir()
    llm = LLMSettings(
        provider=os.getenv("CERO_LLM_PROVIDER", "off").strip().casefold(),
        url=os.getenv("CERO_LLM_URL", "http://127.0.0.1:8001/v1/chat/completions"),
        model=os.getenv("CERO_LLM_MODEL", "gpt-4o-mini"),
        api_key=os.getenv("CERO_LLM_API_KEY") or None,
        timeout_s=_get_float_env("CERO_LLM_TIMEOUT_S", 30.0),
        temperature=_get_float_env("CERO_LLM_TEMPERATURE", 0.2),
        max_tokens=_get_int_env("CERO_LLM_MAX_TOKENS", 256),
    )
    token_path = os.getenv("CERO_GOOGLE_TOKEN_PATH")
    google = GoogleSettings(
        token_path=Path(token_path).expanduser() if token_path else root / "google_token.json",
        client_id=os.getenv("CERO_GOOGLE_CLIENT_ID") or None,
        client_secret=os.getenv("CERO_GOOGLE_CLIENT_SECRET") or None,
        token_uri=os.getenv("CERO_GOOGLE_TOKEN_URI", "https://oauth2.googleapis.com/token"),
        calendar_id=os.getenv("CERO_CALENDAR_ID", "primary"),
        timezone=os.getenv("CERO_TIMEZONE", "America/Argentina/Buenos_Aires"),
    )
    origins = [item.strip() for item in os.getenv("CERO_CORS_ORIGINS", "*").split(",") if item.strip()]
    return CeroSettings(
        state_dir=root,
        llm=llm,
        google=google,
        turn_timeout_s=max(0.01, _get_float_env("CERO_TURN_TIMEOUT_S", 5.0)),
        stream_frame_delay_s=max(0.0, _get_float_env("CERO_STREAM_FRAME_DELAY_S", 0.05)),
        stream_model_name=os.getenv("CERO_STREAM_MODEL_NAME", "cero-proxy"),
        default_identity=os.getenv("CERO_DEFAULT_IDENTITY", "demo-user"),
        tasks_enabled=_is_on("CERO_TASKS_ENABLED", "off"),
        credential_store=os.getenv("CERO_CREDENTIAL_STORE", "memory").strip().casefold(),
        cors_origins=origins or ["*"],
    )


@lru_cache(maxsize=1)
def get_settings() -> CeroSettings:
    return load_settings()
