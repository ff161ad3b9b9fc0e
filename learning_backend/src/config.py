import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

import httpx

from src.services.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SECONDS = 60.0

ORACLE_MODES = ("openai", "sample")


@dataclass(frozen=True)
class OracleSettings:
    """Connection settings for the text completion oracle."""
    mode: str = "openai"
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless an API key and a usable http(s) endpoint are present."""
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        if not self.base_url:
            raise ConfigurationError("OPENAI_BASE_URL is empty")
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"OPENAI_BASE_URL is not a valid URL ('{self.base_url}'): {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(f"OPENAI_BASE_URL must be an absolute http(s) URL, got '{self.base_url}'")


# PUBLIC_INTERFACE
def load_oracle_settings(env: Optional[Mapping[str, str]] = None) -> OracleSettings:
    """
    Read oracle settings from the environment.

    Args:
        env: Mapping to read from; defaults to os.environ (after .env loading).

    Returns:
        OracleSettings. Credentials are validated later, by the oracle that needs them.

    Raises:
        ConfigurationError: ORACLE_MODE is unknown or ORACLE_TIMEOUT_SECONDS is not a number.
    """
    env = os.environ if env is None else env

    mode = (env.get("ORACLE_MODE") or "openai").strip().lower()
    if mode not in ORACLE_MODES:
        raise ConfigurationError(f"ORACLE_MODE must be one of {', '.join(ORACLE_MODES)}, got '{mode}'")

    raw_timeout = (env.get("ORACLE_TIMEOUT_SECONDS") or "").strip()
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        raise ConfigurationError(f"ORACLE_TIMEOUT_SECONDS must be a number, got '{raw_timeout}'")

    return OracleSettings(
        mode=mode,
        api_key=(env.get("OPENAI_API_KEY") or "").strip(),
        base_url=(env.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/"),
        model=(env.get("OPENAI_MODEL") or DEFAULT_MODEL).strip(),
        timeout_seconds=timeout,
    )


def cors_origins(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Allowed CORS origins from CORS_ALLOW_ORIGINS (comma separated), default '*'."""
    env = os.environ if env is None else env
    raw = env.get("CORS_ALLOW_ORIGINS")
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
