"""pexbot_mcp - MCP server for the pex.bot trading simulation API.

Exposes the REST API as MCP tools, resources and prompts, with API key,
session token or email/password authentication and proof-of-work
registration.
"""

__version__ = "0.2.0"

from .auth import Authenticator
from .client import PexBot
from .config import Settings
from .fingerprint import collect_fingerprint
from .pow import solve_challenge, verify_solution
from .types import (
    ApiKey,
    AuthenticationRequired,
    Challenge,
    Fingerprint,
    HttpError,
    LoginFailed,
    NetworkError,
    OrderRequest,
    PexBotError,
    PowExhausted,
    RegisterResult,
    RegistrationFailed,
    UnexpectedResponse,
)

__all__ = [
    # Main client
    "PexBot",
    "Authenticator",
    "Settings",
    # Types
    "ApiKey",
    "Challenge",
    "Fingerprint",
    "OrderRequest",
    "RegisterResult",
    # Errors
    "PexBotError",
    "AuthenticationRequired",
    "LoginFailed",
    "RegistrationFailed",
    "HttpError",
    "NetworkError",
    "PowExhausted",
    "UnexpectedResponse",
    # Utilities
    "collect_fingerprint",
    "solve_challenge",
    "verify_solution",
]
