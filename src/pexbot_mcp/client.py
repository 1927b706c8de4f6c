"""PexBot client - thin async wrapper around the pex.bot REST API.

Attaches an API key or bearer session token to every authenticated call,
logging in lazily when only email/password are configured.
"""

import asyncio
import json as jsonlib
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .auth import Authenticator
from .fingerprint import collect_fingerprint
from .pow import solve_challenge
from .types import (
    ApiKey,
    AuthenticationRequired,
    Challenge,
    HttpError,
    LoginFailed,
    NetworkError,
    OrderRequest,
    PexBotError,
    RegisterResult,
    RegistrationFailed,
    UnexpectedResponse,
)

logger = logging.getLogger(__name__)


class PexBot:
    """Client for the pex.bot trading simulation API.

    Usage:
        # With a saved API key
        async with PexBot(api_key="pk_...") as bot:
            balance = await bot.get_balance()

        # New account
        async with PexBot() as bot:
            result = await bot.register(email="me@example.com", password="...")
            # Save result.api_key and restart with PEXBOT_API_KEY set
    """

    DEFAULT_BASE_URL = "https://pex.bot/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        token: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        pow_max_attempts: Optional[int] = None,
        auth: Optional[Authenticator] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Static API key (highest precedence)
            token: Bearer session token
            email: Account email for automatic login
            password: Account password for automatic login
            base_url: API base URL (default: https://pex.bot/api/v1)
            timeout: Request timeout in seconds (default: httpx default)
            pow_max_attempts: Cap on proof-of-work attempts (default: unbounded)
            auth: Pre-built Authenticator, overrides the credential arguments
            http_client: Pre-built httpx.AsyncClient
        """
        self.base_url = base_url.rstrip("/")
        self.auth = auth or Authenticator(
            api_key=api_key, token=token, email=email, password=password
        )
        self.pow_max_attempts = pow_max_attempts

        if http_client is not None:
            self._client = http_client
        elif timeout is not None:
            self._client = httpx.AsyncClient(timeout=timeout)
        else:
            self._client = httpx.AsyncClient()

    # -------------------------------------------------------------------------
    # Registration & Login
    # -------------------------------------------------------------------------

    async def get_challenge(self) -> Challenge:
        """Get a proof-of-work challenge for registration."""
        path = "/auth/challenge"
        response = self._expect("GET", path, await self.get_public(path), "nonce")
        try:
            difficulty = int(response.get("difficulty", 4))
        except (TypeError, ValueError):
            raise UnexpectedResponse("GET", path, "difficulty is not an integer")
        return Challenge(nonce=str(response["nonce"]), difficulty=difficulty)

    async def register(
        self,
        email: str,
        password: str,
        nickname: Optional[str] = None,
        model_name: Optional[str] = None,
        api_key_name: str = "pexbot-mcp",
    ) -> RegisterResult:
        """Register a new agent account.

        Fetches and solves a proof-of-work challenge, submits the device
        fingerprint, stores the returned session token and mints an API key
        under it.

        The minted key is returned but not switched to: this client keeps
        using the session token until restarted with the key configured.

        Args:
            email: Account email
            password: Account password
            nickname: Display name (optional)
            model_name: AI model driving this agent (default: CPU model)
            api_key_name: Label for the minted API key

        Returns:
            RegisterResult with api_key (SAVE THIS!)

        Raises:
            RegistrationFailed: If any step fails.
        """
        try:
            challenge = await self.get_challenge()
        except PexBotError as e:
            raise RegistrationFailed("challenge", e.message) from e

        try:
            solution = await asyncio.to_thread(
                solve_challenge, challenge.nonce, challenge.difficulty, self.pow_max_attempts
            )
        except PexBotError as e:
            raise RegistrationFailed("proof-of-work", e.message) from e

        fingerprint = collect_fingerprint()

        payload = {
            "email": email,
            "password": password,
            "nickname": nickname,
            "user_type": "agent",
            "model_name": model_name or fingerprint.model_name,
            "nonce": challenge.nonce,
            "solution": solution,
            "mac_address": fingerprint.mac_address,
            "hostname": fingerprint.hostname,
            "cpu_info": fingerprint.cpu_info,
        }
        payload = {k: v for k, v in payload.items() if v is not None}

        try:
            response = self._expect(
                "POST", "/auth/register", await self.post_public("/auth/register", payload), "token"
            )
        except PexBotError as e:
            raise RegistrationFailed("register", e.message) from e

        token = response["token"]
        self.auth.set_token(token)
        logger.info("Registered %s (user %s)", response.get("email", email), response.get("user_id"))

        try:
            key = await self.create_api_key(api_key_name)
        except PexBotError as e:
            raise RegistrationFailed("api key creation", e.message) from e

        return RegisterResult(
            user_id=str(response.get("user_id", "")),
            email=response.get("email", email),
            token=token,
            api_key=key.key,
            api_key_id=key.id,
            api_key_name=key.name,
        )

    async def login(self, email: Optional[str] = None, password: Optional[str] = None) -> str:
        """Log in and store the session token.

        Args:
            email: Account email (default: configured email)
            password: Account password (default: configured password)

        Returns:
            The session token.

        Raises:
            LoginFailed: If the server rejects the credentials.
        """
        email = email or self.auth.email
        password = password or self.auth.password
        if not email or not password:
            raise LoginFailed("email and password are required")

        response = await self._send(
            "POST", "/auth/login", json={"email": email, "password": password}, signed=False
        )
        if not response.is_success:
            raise LoginFailed(
                self._error_message(response) or response.reason_phrase,
                status_code=response.status_code,
            )

        data = self._parse(response)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise LoginFailed("response did not include a token")

        self.auth.set_token(token)
        logger.info("Logged in as %s", email)
        return token

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def activate(self) -> dict:
        """Activate the account by registering this device."""
        return await self.post("/auth/activate", collect_fingerprint().to_dict())

    async def get_me(self) -> dict:
        """Get the authenticated account's profile."""
        return await self.get("/auth/me")

    async def create_api_key(self, name: str = "pexbot-mcp") -> ApiKey:
        """Mint a durable API key under the current credential."""
        path = "/auth/api-keys"
        response = self._expect("POST", path, await self.post(path, {"name": name}), "key")
        return ApiKey(
            id=str(response.get("id", "")),
            key=response["key"],
            name=response.get("name", name),
        )

    async def get_balance(self) -> List[dict]:
        """Balances per asset: {asset, available, locked}."""
        return await self.get("/account/balance")

    # -------------------------------------------------------------------------
    # Markets & Orders
    # -------------------------------------------------------------------------

    async def get_markets(self) -> List[dict]:
        return await self.get("/markets")

    async def get_ticker(self, symbol: str) -> dict:
        return await self.get(f"/markets/{quote(symbol, safe='')}/ticker")

    async def get_orderbook(self, symbol: str, depth: int = 20) -> dict:
        return await self.get(f"/markets/{quote(symbol, safe='')}/orderbook?depth={depth}")

    async def place_order(self, order: OrderRequest) -> dict:
        """Place an order. Only supplied fields are sent."""
        return await self.post("/orders", order.to_payload())

    async def cancel_order(self, order_id: str) -> dict:
        return await self.delete(f"/orders/{quote(order_id, safe='')}")

    # -------------------------------------------------------------------------
    # Autonomous arena
    # -------------------------------------------------------------------------

    async def join_autonomous(self, model_name: Optional[str] = None) -> dict:
        """Join the autonomous arena: {run_id, user_id, seed_capital, api_key}."""
        payload = {"model_name": model_name} if model_name else {}
        return await self.post("/autonomous/join", payload)

    async def get_my_runs(self) -> List[dict]:
        return await self.get("/me/runs")

    async def list_agents(self) -> List[dict]:
        return await self.get_public("/autonomous/agents")

    async def get_decisions(self, limit: int = 20) -> List[dict]:
        return await self.get_public(f"/decisions?limit={limit}")

    async def get_current_regime(self) -> dict:
        return await self.get_public("/regimes/current")

    # -------------------------------------------------------------------------
    # HTTP verbs
    # -------------------------------------------------------------------------

    async def get(self, path: str) -> Any:
        return await self._request("GET", path)

    async def get_public(self, path: str) -> Any:
        return await self._request("GET", path, signed=False)

    async def post(self, path: str, body: Optional[dict] = None) -> Any:
        return await self._request("POST", path, json=body if body is not None else {})

    async def post_public(self, path: str, body: Optional[dict] = None) -> Any:
        return await self._request(
            "POST", path, json=body if body is not None else {}, signed=False
        )

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _auth_headers(self) -> Dict[str, str]:
        """Headers for the active credential, logging in first if needed."""
        headers = self.auth.headers()
        if headers:
            return headers

        if not self.auth.can_login:
            raise AuthenticationRequired()

        async with self.auth.login_lock:
            # Another call may have logged in while we waited
            if self.auth.headers() is None:
                await self.login()

        return self.auth.headers()

    async def _send(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        signed: bool = True,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = {}
        body = None

        if json is not None:
            body = jsonlib.dumps(json).encode()
            headers["Content-Type"] = "application/json"

        if signed:
            headers.update(await self._auth_headers())

        logger.debug("%s %s", method, path)
        try:
            return await self._client.request(method, url, content=body, headers=headers)
        except httpx.RequestError as e:
            raise NetworkError(method, path, str(e) or type(e).__name__) from e

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        signed: bool = True,
    ) -> Any:
        """Make a request to the pex.bot API."""
        response = await self._send(method, path, json=json, signed=signed)

        if not response.is_success:
            self._handle_error(method, path, response)

        return self._parse(response)

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError:
            return {"detail": response.text}

    @staticmethod
    def _expect(method: str, path: str, data: Any, *keys: str) -> dict:
        """Check that a success body is an object carrying the given keys."""
        if not isinstance(data, dict):
            raise UnexpectedResponse(method, path, f"expected an object, got {type(data).__name__}")
        missing = [key for key in keys if not data.get(key)]
        if missing:
            raise UnexpectedResponse(method, path, f"missing {', '.join(missing)}")
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> Optional[str]:
        """Server message from a JSON error body, if it has one."""
        try:
            data = response.json()
        except ValueError:
            return None

        if isinstance(data, dict):
            for field in ("detail", "message", "error"):
                value = data.get(field)
                if value:
                    return value if isinstance(value, str) else jsonlib.dumps(value)
        return None

    def _handle_error(self, method: str, path: str, response: httpx.Response) -> None:
        """Handle API error responses."""
        detail = self._error_message(response) or response.text or response.reason_phrase
        raise HttpError(method, path, response.status_code, response.text, detail)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
