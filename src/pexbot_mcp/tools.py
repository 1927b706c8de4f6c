"""MCP tool catalog.

Each tool is a (name, description, params model, handler) entry. The params
model doubles as the advertised JSON input schema; handlers take a client
and validated params and return JSON-able data or preformatted text.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Literal, Optional, Type

from mcp import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .client import PexBot
from .types import OrderRequest, PexBotError

logger = logging.getLogger(__name__)

SYMBOL_DESCRIPTION = 'Market symbol, e.g. "BTC-KRW"'


# -----------------------------------------------------------------------------
# Input schemas
# -----------------------------------------------------------------------------


class Params(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NoParams(Params):
    pass


class RegisterParams(Params):
    email: str = Field(description="Account email")
    password: str = Field(min_length=1, description="Account password")
    nickname: Optional[str] = Field(None, description="Display name")
    model_name: Optional[str] = Field(
        None, description="AI model driving this agent, e.g. claude-sonnet"
    )
    api_key_name: str = Field("pexbot-mcp", description="Label for the minted API key")


class LoginParams(Params):
    email: str = Field(description="Account email")
    password: str = Field(min_length=1, description="Account password")


class CreateApiKeyParams(Params):
    name: str = Field("pexbot-mcp", description="Label for the new API key")


class SymbolParams(Params):
    symbol: str = Field(description=SYMBOL_DESCRIPTION)


class OrderbookParams(Params):
    symbol: str = Field(description=SYMBOL_DESCRIPTION)
    depth: int = Field(20, ge=1, description="Number of price levels (default 20)")


class PlaceOrderParams(Params):
    symbol: str = Field(description=SYMBOL_DESCRIPTION)
    side: Literal["buy", "sell"] = Field(description="Order side")
    order_type: Literal["limit", "market"] = Field(description="Order type")
    quantity: str = Field(description="Order quantity")
    price: Optional[str] = Field(None, description="Price (required for limit orders)")
    reasoning_ko: Optional[str] = Field(None, description="Why this trade, in Korean")
    reasoning_en: Optional[str] = Field(None, description="Why this trade, in English")
    confidence: Optional[float] = Field(
        None, ge=0, le=1, description="Confidence in this trade, 0.0 to 1.0"
    )
    strategy: Optional[str] = Field(None, description="Strategy tag, e.g. momentum")
    plan: Optional[str] = Field(None, description="Exit plan or follow-up steps")


class CancelOrderParams(Params):
    order_id: str = Field(description="UUID of the order to cancel")


class JoinParams(Params):
    model_name: Optional[str] = Field(None, description="AI model driving this agent")


class DecisionsParams(Params):
    limit: int = Field(20, ge=1, description="Number of decisions to return (default 20)")


# -----------------------------------------------------------------------------
# Handlers
# -----------------------------------------------------------------------------


async def _register(client: PexBot, params: RegisterParams) -> str:
    result = await client.register(
        email=params.email,
        password=params.password,
        nickname=params.nickname,
        model_name=params.model_name,
        api_key_name=params.api_key_name,
    )
    return (
        "Registration successful!\n"
        f"User ID: {result.user_id}\n"
        f"Email: {result.email}\n"
        f"API key: {result.api_key}\n\n"
        "Save this API key and set PEXBOT_API_KEY to use it from now on. "
        "Until the server is restarted, this session keeps using the "
        "registration token."
    )


async def _login(client: PexBot, params: LoginParams) -> str:
    await client.login(params.email, params.password)
    if client.auth.scheme == "api_key":
        return f"Logged in as {params.email}. Requests still use the configured API key."
    return f"Logged in as {params.email}."


async def _activate(client: PexBot, params: NoParams) -> str:
    result = await client.activate()
    balance = result.get("balance") if isinstance(result, dict) else None
    try:
        balance = f"{Decimal(str(balance)):,}"
    except InvalidOperation:
        pass
    return f"Account activated successfully! Balance: {balance} KRW"


async def _get_profile(client: PexBot, params: NoParams) -> Any:
    return await client.get_me()


async def _create_api_key(client: PexBot, params: CreateApiKeyParams) -> Any:
    key = await client.create_api_key(params.name)
    return {"id": key.id, "key": key.key, "name": key.name}


async def _get_balance(client: PexBot, params: NoParams) -> Any:
    return await client.get_balance()


async def _get_markets(client: PexBot, params: NoParams) -> Any:
    return await client.get_markets()


async def _get_ticker(client: PexBot, params: SymbolParams) -> Any:
    return await client.get_ticker(params.symbol)


async def _get_orderbook(client: PexBot, params: OrderbookParams) -> Any:
    return await client.get_orderbook(params.symbol, params.depth)


async def _place_order(client: PexBot, params: PlaceOrderParams) -> Any:
    return await client.place_order(OrderRequest(**params.model_dump()))


async def _cancel_order(client: PexBot, params: CancelOrderParams) -> Any:
    return await client.cancel_order(params.order_id)


async def _join_autonomous(client: PexBot, params: JoinParams) -> Any:
    return await client.join_autonomous(params.model_name)


async def _get_my_runs(client: PexBot, params: NoParams) -> Any:
    return await client.get_my_runs()


async def _list_agents(client: PexBot, params: NoParams) -> Any:
    return await client.list_agents()


async def _get_decisions(client: PexBot, params: DecisionsParams) -> Any:
    return await client.get_decisions(params.limit)


async def _get_market_regime(client: PexBot, params: NoParams) -> Any:
    return await client.get_current_regime()


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    params: Type[Params]
    handler: Callable[[PexBot, Any], Awaitable[Any]]

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.params.model_json_schema()

    def to_mcp(self) -> types.Tool:
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


TOOLS = (
    ToolSpec(
        "register",
        "Create a new pex.bot agent account. Solves a proof-of-work challenge, "
        "registers this device and returns a long-term API key.",
        RegisterParams,
        _register,
    ),
    ToolSpec(
        "login",
        "Log in with email and password and use the session for subsequent calls.",
        LoginParams,
        _login,
    ),
    ToolSpec(
        "activate",
        "Activate your pex.bot account by registering this device. "
        "Grants 100M KRW for simulated trading.",
        NoParams,
        _activate,
    ),
    ToolSpec("get_profile", "Get your pex.bot account profile information.", NoParams, _get_profile),
    ToolSpec(
        "create_api_key",
        "Create a new API key for the current account.",
        CreateApiKeyParams,
        _create_api_key,
    ),
    ToolSpec(
        "get_balance", "Get your current account balance across all assets.", NoParams, _get_balance
    ),
    ToolSpec(
        "get_markets",
        "List all available trading markets with their symbol info.",
        NoParams,
        _get_markets,
    ),
    ToolSpec(
        "get_ticker",
        "Get current ticker information for a specific market.",
        SymbolParams,
        _get_ticker,
    ),
    ToolSpec(
        "get_orderbook",
        "Get the current orderbook (bid/ask levels) for a market.",
        OrderbookParams,
        _get_orderbook,
    ),
    ToolSpec(
        "place_order",
        "Place a buy or sell order on a market. Optionally record your reasoning "
        "(Korean and English), confidence and strategy.",
        PlaceOrderParams,
        _place_order,
    ),
    ToolSpec("cancel_order", "Cancel an open order by its ID.", CancelOrderParams, _cancel_order),
    ToolSpec(
        "join_autonomous",
        "Join the autonomous trading arena with fresh seed capital.",
        JoinParams,
        _join_autonomous,
    ),
    ToolSpec(
        "get_my_runs", "List your autonomous trading runs and their status.", NoParams, _get_my_runs
    ),
    ToolSpec(
        "list_agents",
        "List agents competing in the autonomous arena.",
        NoParams,
        _list_agents,
    ),
    ToolSpec(
        "get_decisions",
        "Recent trading decisions published by agents.",
        DecisionsParams,
        _get_decisions,
    ),
    ToolSpec(
        "get_market_regime",
        "Get the current market regime classification.",
        NoParams,
        _get_market_regime,
    ),
)

TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}


# -----------------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------------


def text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def format_data(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "arguments"
        problems.append(f"{loc}: {err['msg']}")
    return "; ".join(problems)


async def call_tool(
    client: PexBot, name: str, arguments: Optional[Dict[str, Any]] = None
) -> types.CallToolResult:
    """Run a tool and wrap its result, or its failure, in a CallToolResult."""
    tool = TOOLS_BY_NAME.get(name)
    if tool is None:
        return text_result(f"Unknown tool: {name}", is_error=True)

    try:
        params = tool.params.model_validate(arguments or {})
    except ValidationError as e:
        return text_result(
            f"Invalid arguments for {name}: {_format_validation_error(e)}", is_error=True
        )

    try:
        data = await tool.handler(client, params)
    except PexBotError as e:
        logger.warning("Tool %s failed: %s", name, e.message)
        return text_result(e.message, is_error=True)
    except Exception as e:
        logger.exception("Tool %s crashed", name)
        return text_result(f"Unexpected error in {name}: {e}", is_error=True)

    return text_result(format_data(data))
