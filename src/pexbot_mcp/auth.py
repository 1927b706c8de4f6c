"""Credential state for pex.bot requests.

Three states: unset, API key, session token. An API key supplied at
construction always wins and is never replaced; session tokens arrive from
configuration, a lazy login, or an explicit registration.
"""

import asyncio
from typing import Dict, Optional


class Authenticator:
    """Owns the single credential slot of a client.

    Usage:
        auth = Authenticator(api_key="pk_...")
        auth.headers()  # {"X-API-Key": "pk_..."}

        auth = Authenticator(email="a@b.c", password="...")
        auth.headers()  # None until a login stores a token
        auth.set_token("eyJ...")
        auth.headers()  # {"Authorization": "Bearer eyJ..."}
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        token: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self._api_key = api_key or None
        self._token = token or None
        self.email = email or None
        self.password = password or None

        # Serializes first-time login so concurrent calls log in once
        self.login_lock = asyncio.Lock()

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def scheme(self) -> Optional[str]:
        """Active scheme: "api_key", "token" or None."""
        if self._api_key:
            return "api_key"
        if self._token:
            return "token"
        return None

    @property
    def can_login(self) -> bool:
        return bool(self.email and self.password)

    def set_token(self, token: str) -> None:
        """Store a session token. Has no effect on precedence over an API key."""
        self._token = token

    def headers(self) -> Optional[Dict[str, str]]:
        """Auth headers for the active credential, or None if there is none."""
        if self._api_key:
            return {"X-API-Key": self._api_key}
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return None

    def describe(self) -> str:
        """Human-readable auth mode, safe to log."""
        if self._api_key:
            return "API key authentication"
        if self._token:
            return "session token authentication (fallback)"
        if self.can_login:
            return f"email login as {self.email} (on first use)"
        return "no credentials"
