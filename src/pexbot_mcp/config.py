"""Environment configuration."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .client import PexBot


def _get(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name, "").strip()
    return value or None


@dataclass
class Settings:
    """Server settings, read from PEXBOT_* environment variables."""

    base_url: str = PexBot.DEFAULT_BASE_URL
    api_key: Optional[str] = None
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        timeout = _get(env, "PEXBOT_TIMEOUT")
        if timeout:
            try:
                timeout = float(timeout)
            except ValueError:
                raise ValueError(f"PEXBOT_TIMEOUT must be a number of seconds, got {timeout!r}") from None

        return cls(
            base_url=_get(env, "PEXBOT_API_URL") or PexBot.DEFAULT_BASE_URL,
            api_key=_get(env, "PEXBOT_API_KEY"),
            token=_get(env, "PEXBOT_TOKEN"),
            email=_get(env, "PEXBOT_EMAIL"),
            password=_get(env, "PEXBOT_PASSWORD"),
            timeout=timeout or None,
            log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
        )

    def create_client(self) -> PexBot:
        return PexBot(
            api_key=self.api_key,
            token=self.token,
            email=self.email,
            password=self.password,
            base_url=self.base_url,
            timeout=self.timeout,
        )
