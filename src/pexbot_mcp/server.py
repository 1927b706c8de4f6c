"""MCP server exposing pex.bot tools, resources and prompts over stdio.

Run:
    pexbot-mcp
    python -m pexbot_mcp
"""

import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from . import __version__
from .client import PexBot
from .config import Settings
from .prompts import PROMPTS, get_prompt
from .resources import RESOURCES, read_resource
from .tools import TOOLS, call_tool

logger = logging.getLogger(__name__)


class ToolInvocationError(Exception):
    """Carries an error envelope's text back through the MCP server."""


def build_server(client: PexBot) -> Server:
    """Wire the tool, resource and prompt catalogs into an MCP server."""
    server = Server("pexbot-mcp", version=__version__)

    @server.list_tools()
    async def _list_tools() -> List[types.Tool]:
        return [tool.to_mcp() for tool in TOOLS]

    @server.call_tool()
    async def _call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        result = await call_tool(client, name, arguments)
        if result.isError:
            # The server turns a raised exception into an isError result
            raise ToolInvocationError(result.content[0].text)
        return result.content

    @server.list_resources()
    async def _list_resources() -> List[types.Resource]:
        return [resource.to_mcp() for resource in RESOURCES]

    @server.read_resource()
    async def _read_resource(uri: AnyUrl) -> List[ReadResourceContents]:
        text = await read_resource(client, str(uri))
        return [ReadResourceContents(content=text, mime_type="application/json")]

    @server.list_prompts()
    async def _list_prompts() -> List[types.Prompt]:
        return [prompt.to_mcp() for prompt in PROMPTS]

    @server.get_prompt()
    async def _get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        return get_prompt(name, arguments)

    return server


async def serve(settings: Settings) -> None:
    """Run the server on stdio until the client disconnects."""
    async with settings.create_client() as client:
        if client.auth.scheme is None and not client.auth.can_login:
            logger.warning(
                "No auth credentials found. Set PEXBOT_API_KEY or PEXBOT_TOKEN, "
                "or use the register tool."
            )
        else:
            logger.info("Using %s", client.auth.describe())

        server = build_server(client)
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Server running on stdio (%s)", settings.base_url)
            await server.run(read_stream, write_stream, server.create_initialization_options())


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the MCP stream
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="[pexbot-mcp] %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ValueError as e:
        configure_logging()
        logger.error("Fatal error: %s", e)
        sys.exit(1)
    configure_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
