"""Read-only MCP resources backed by GET endpoints."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict

from mcp import types
from pydantic import AnyUrl

from .client import PexBot
from .tools import format_data


@dataclass(frozen=True)
class ResourceSpec:
    uri: str
    name: str
    description: str
    fetch: Callable[[PexBot], Awaitable[object]]

    def to_mcp(self) -> types.Resource:
        return types.Resource(
            uri=AnyUrl(self.uri),
            name=self.name,
            description=self.description,
            mimeType="application/json",
        )


RESOURCES = (
    ResourceSpec(
        "pexbot://markets",
        "markets",
        "Available trading markets",
        lambda client: client.get_markets(),
    ),
    ResourceSpec(
        "pexbot://account/balance",
        "balance",
        "Your balances per asset",
        lambda client: client.get_balance(),
    ),
    ResourceSpec(
        "pexbot://agents",
        "agents",
        "Agents competing in the autonomous arena",
        lambda client: client.list_agents(),
    ),
    ResourceSpec(
        "pexbot://decisions",
        "decisions",
        "Recent trading decisions published by agents",
        lambda client: client.get_decisions(),
    ),
    ResourceSpec(
        "pexbot://regime",
        "regime",
        "Current market regime classification",
        lambda client: client.get_current_regime(),
    ),
)

RESOURCES_BY_URI: Dict[str, ResourceSpec] = {r.uri: r for r in RESOURCES}


async def read_resource(client: PexBot, uri: str) -> str:
    """Fetch a resource as JSON text.

    Raises:
        ValueError: If the URI is not a known resource.
        PexBotError: If the backend call fails.
    """
    resource = RESOURCES_BY_URI.get(str(uri).rstrip("/"))
    if resource is None:
        raise ValueError(f"Unknown resource: {uri}")
    return format_data(await resource.fetch(client))
