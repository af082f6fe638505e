"""Runtime settings read from the environment (and .env)."""

import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from dealroom.core.errors import ConfigError

load_dotenv()

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_WINDOW_MINUTES = 18.0
DEFAULT_ACCEPTABLE_OFFER = 850_000.0
DEFAULT_GENERATION_TIMEOUT = 30.0
DEFAULT_ACCESS_CODES = "ABC123,DEF456,GHI789"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _codes_env(name: str, default: str) -> frozenset[str]:
    raw = os.getenv(name, default)
    return frozenset(code.strip() for code in raw.split(",") if code.strip())


@dataclass(frozen=True)
class Settings:
    openai_model: str = DEFAULT_MODEL
    negotiation_window: timedelta = timedelta(minutes=DEFAULT_WINDOW_MINUTES)
    acceptable_offer: float = DEFAULT_ACCEPTABLE_OFFER
    generation_timeout: float = DEFAULT_GENERATION_TIMEOUT
    access_codes: frozenset[str] = frozenset(DEFAULT_ACCESS_CODES.split(","))
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls) -> "Settings":
        window_minutes = _float_env("NEGOTIATION_WINDOW_MINUTES", DEFAULT_WINDOW_MINUTES)
        if window_minutes <= 0:
            raise ConfigError("NEGOTIATION_WINDOW_MINUTES must be positive")

        log_format = os.getenv("LOG_FORMAT", "console").lower()
        if log_format not in ("console", "json"):
            raise ConfigError(f"LOG_FORMAT must be 'console' or 'json', got {log_format!r}")

        return cls(
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
            negotiation_window=timedelta(minutes=window_minutes),
            acceptable_offer=_float_env("ACCEPTABLE_OFFER_THRESHOLD", DEFAULT_ACCEPTABLE_OFFER),
            generation_timeout=_float_env("GENERATION_TIMEOUT_SECONDS", DEFAULT_GENERATION_TIMEOUT),
            access_codes=_codes_env("ACCESS_CODES", DEFAULT_ACCESS_CODES),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
        )
