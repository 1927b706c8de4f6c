"""MCP prompt templates for common trading workflows."""

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from mcp import types


def _analyze_market(args: Mapping[str, str]) -> str:
    symbol = args["symbol"]
    return (
        f"Analyze the {symbol} market on pex.bot.\n\n"
        f"1. Call get_ticker and get_orderbook for {symbol}.\n"
        "2. Call get_market_regime to see the current regime.\n"
        "3. Summarize price action, spread, book imbalance and regime.\n"
        "4. Give a buy, sell or hold view with a confidence between 0 and 1."
    )


def _trading_session(args: Mapping[str, str]) -> str:
    symbol = args.get("symbol") or "the most liquid KRW market"
    risk = args.get("risk") or "moderate"
    return (
        f"Run a simulated trading session on pex.bot focused on {symbol} "
        f"with {risk} risk.\n\n"
        "1. Check get_balance and get_markets.\n"
        "2. Analyze the market with get_ticker, get_orderbook and get_market_regime.\n"
        "3. If you trade, use place_order and fill in reasoning_ko, reasoning_en, "
        "confidence and strategy so the decision is explained.\n"
        "4. Never risk more than 10% of available KRW on a single order.\n"
        "5. Report what you did and why."
    )


def _review_performance(args: Mapping[str, str]) -> str:
    return (
        "Review my trading performance on pex.bot.\n\n"
        "1. Call get_balance and get_my_runs.\n"
        "2. Compare with other agents using list_agents and get_decisions.\n"
        "3. Summarize results, mistakes and what to change next."
    )


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    arguments: Tuple[types.PromptArgument, ...]
    render: Callable[[Mapping[str, str]], str]

    def to_mcp(self) -> types.Prompt:
        return types.Prompt(
            name=self.name, description=self.description, arguments=list(self.arguments)
        )


PROMPTS = (
    PromptSpec(
        "analyze_market",
        "Analyze a market and give a trading view",
        (types.PromptArgument(name="symbol", description='e.g. "BTC-KRW"', required=True),),
        _analyze_market,
    ),
    PromptSpec(
        "trading_session",
        "Run a simulated trading session with explained decisions",
        (
            types.PromptArgument(name="symbol", description="Market to focus on", required=False),
            types.PromptArgument(
                name="risk", description="low, moderate or high", required=False
            ),
        ),
        _trading_session,
    ),
    PromptSpec(
        "review_performance",
        "Review balances, runs and recent decisions",
        (),
        _review_performance,
    ),
)

PROMPTS_BY_NAME: Dict[str, PromptSpec] = {p.name: p for p in PROMPTS}


def get_prompt(name: str, arguments: Optional[Mapping[str, str]] = None) -> types.GetPromptResult:
    """Render a prompt template.

    Raises:
        ValueError: If the prompt is unknown or a required argument is missing.
    """
    prompt = PROMPTS_BY_NAME.get(name)
    if prompt is None:
        raise ValueError(f"Unknown prompt: {name}")

    arguments = arguments or {}
    for arg in prompt.arguments:
        if arg.required and not arguments.get(arg.name):
            raise ValueError(f"Missing required argument: {arg.name}")

    return types.GetPromptResult(
        description=prompt.description,
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=prompt.render(arguments)),
            )
        ],
    )
