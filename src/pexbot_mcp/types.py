"""Type definitions for the pex.bot MCP server."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

NULL_MAC = "00:00:00:00:00:00"


@dataclass(frozen=True)
class Fingerprint:
    """Snapshot of local host identifiers sent on registration/activation."""

    mac_address: str = NULL_MAC
    hostname: str = ""
    os: str = ""
    model_name: Optional[str] = None  # CPU model
    cpu_info: Optional[str] = None  # "<model> (<n> cores)"

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class Challenge:
    """Proof-of-work challenge for account registration."""

    nonce: str
    difficulty: int = 4


@dataclass
class OrderRequest:
    """Order submitted to POST /orders.

    Only the fields that were supplied end up in the request body; the
    remote exchange is responsible for business validation (e.g. price
    being required for limit orders).
    """

    symbol: str
    side: str  # buy | sell
    order_type: str  # limit | market
    quantity: str
    price: Optional[str] = None
    reasoning_ko: Optional[str] = None
    reasoning_en: Optional[str] = None
    confidence: Optional[float] = None  # 0.0 - 1.0
    strategy: Optional[str] = None
    plan: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ApiKey:
    """A durable API key minted under a session."""

    id: str
    key: str
    name: str


@dataclass
class RegisterResult:
    """Result of successful account registration."""

    user_id: str
    email: str
    token: str  # session token, active for this process only
    api_key: str  # SAVE THIS - recommended long-term credential
    api_key_id: Optional[str] = None
    api_key_name: Optional[str] = None


class PexBotError(Exception):
    """Base error for everything raised by this package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationRequired(PexBotError):
    """No usable credential for an endpoint that requires one."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Authentication required: set PEXBOT_API_KEY (or PEXBOT_TOKEN, "
            "or PEXBOT_EMAIL and PEXBOT_PASSWORD), or call the register tool"
        )


class LoginFailed(PexBotError):
    """Login was rejected by the server."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(f"Login failed: {message}")


class RegistrationFailed(PexBotError):
    """A step of challenge/solve/register/key-mint failed."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"Registration failed during {step}: {message}")


class HttpError(PexBotError):
    """Non-success response from the backend."""

    def __init__(
        self, method: str, path: str, status_code: int, body: str, detail: Optional[str] = None
    ):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body  # raw response text
        self.detail = detail or body
        super().__init__(f"API {method} {path} failed ({status_code}): {self.detail}")


class UnexpectedResponse(PexBotError):
    """Success response whose body is not the expected shape."""

    def __init__(self, method: str, path: str, reason: str):
        self.method = method
        self.path = path
        super().__init__(f"API {method} {path} returned an unexpected response: {reason}")


class NetworkError(PexBotError):
    """Transport-level failure (DNS, connection refused, timeout...)."""

    def __init__(self, method: str, path: str, reason: str):
        self.method = method
        self.path = path
        super().__init__(f"API {method} {path} network error: {reason}")


class PowExhausted(PexBotError):
    """Proof-of-work search gave up after max_attempts."""

    def __init__(self, nonce: str, attempts: int):
        self.nonce = nonce
        self.attempts = attempts
        super().__init__(f"Proof-of-work not solved after {attempts} attempts")
