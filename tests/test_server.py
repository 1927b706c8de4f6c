"""Tests for MCP server wiring."""

import logging

import pytest
from mcp import types

from pexbot_mcp import server as server_module
from pexbot_mcp.prompts import PROMPTS
from pexbot_mcp.resources import RESOURCES
from pexbot_mcp.tools import TOOLS


async def test_lists_tools(make_client):
    """Test listing tools through the server."""
    server = server_module.build_server(make_client())

    handler = server.request_handlers[types.ListToolsRequest]
    result = await handler(types.ListToolsRequest(method="tools/list"))

    assert [tool.name for tool in result.root.tools] == [tool.name for tool in TOOLS]


async def test_lists_resources_and_prompts(make_client):
    """Test listing resources and prompts through the server."""
    server = server_module.build_server(make_client())

    resources = await server.request_handlers[types.ListResourcesRequest](
        types.ListResourcesRequest(method="resources/list")
    )
    prompts = await server.request_handlers[types.ListPromptsRequest](
        types.ListPromptsRequest(method="prompts/list")
    )

    assert len(resources.root.resources) == len(RESOURCES)
    assert [p.name for p in prompts.root.prompts] == [p.name for p in PROMPTS]


async def test_get_prompt(make_client):
    """Test getting a prompt through the server."""
    server = server_module.build_server(make_client())

    result = await server.request_handlers[types.GetPromptRequest](
        types.GetPromptRequest(
            method="prompts/get",
            params=types.GetPromptRequestParams(name="analyze_market", arguments={"symbol": "BTC-KRW"}),
        )
    )

    assert "BTC-KRW" in result.root.messages[0].content.text


def test_main_exits_nonzero_on_fatal_error(monkeypatch, caplog):
    """Test that a crash while serving exits with status 1."""
    async def broken(settings):
        raise RuntimeError("stdio unavailable")

    monkeypatch.setattr(server_module, "serve", broken)
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setattr(server_module, "configure_logging", lambda level="INFO": None)

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
        server_module.main()

    assert exc_info.value.code == 1
    assert "Fatal error" in caplog.text


def test_main_exits_nonzero_on_bad_configuration(monkeypatch, caplog):
    """Test that a bad PEXBOT_TIMEOUT logs a fatal error and exits with status 1."""
    served = []

    async def serve(settings):
        served.append(settings)

    monkeypatch.setenv("PEXBOT_TIMEOUT", "soon")
    monkeypatch.setattr(server_module, "serve", serve)
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setattr(server_module, "configure_logging", lambda level="INFO": None)

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
        server_module.main()

    assert exc_info.value.code == 1
    assert "Fatal error" in caplog.text
    assert "PEXBOT_TIMEOUT" in caplog.text
    assert served == []
