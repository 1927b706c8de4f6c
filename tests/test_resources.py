"""Tests for MCP resources and prompt templates."""

import json

import pytest

from pexbot_mcp import HttpError
from pexbot_mcp.prompts import PROMPTS, get_prompt
from pexbot_mcp.resources import RESOURCES, read_resource


def test_resource_uris_are_unique():
    """Test resource URI uniqueness and scheme."""
    uris = [r.uri for r in RESOURCES]
    assert len(uris) == len(set(uris))
    assert all(uri.startswith("pexbot://") for uri in uris)


async def test_read_public_resource(backend, make_client):
    """Test reading a public resource."""
    backend.add("GET", "/regimes/current", json={"regime": "sideways", "confidence": 0.6})

    text = await read_resource(make_client(), "pexbot://regime")

    assert json.loads(text) == {"regime": "sideways", "confidence": 0.6}


async def test_read_authenticated_resource(backend, make_client):
    """Test reading a resource that needs a credential."""
    backend.add("GET", "/account/balance", json=[{"asset": "KRW", "available": "5", "locked": "0"}])

    text = await read_resource(make_client(token="jwt"), "pexbot://account/balance")

    assert json.loads(text)[0]["asset"] == "KRW"
    assert backend.requests[0].headers["Authorization"] == "Bearer jwt"


async def test_unknown_resource(make_client):
    """Test reading an unknown resource URI."""
    with pytest.raises(ValueError, match="Unknown resource"):
        await read_resource(make_client(), "pexbot://secrets")


async def test_resource_backend_error_propagates(backend, make_client):
    """Test that backend errors propagate from resources."""
    backend.add("GET", "/autonomous/agents", 500, text="boom")

    with pytest.raises(HttpError):
        await read_resource(make_client(), "pexbot://agents")


def test_prompt_names():
    """Test the prompt catalog."""
    assert {p.name for p in PROMPTS} == {"analyze_market", "trading_session", "review_performance"}


def test_analyze_market_prompt():
    """Test rendering the analyze_market prompt."""
    result = get_prompt("analyze_market", {"symbol": "ETH-KRW"})

    (message,) = result.messages
    assert message.role == "user"
    assert "ETH-KRW" in message.content.text


def test_prompt_requires_arguments():
    """Test that a missing required prompt argument is rejected."""
    with pytest.raises(ValueError, match="symbol"):
        get_prompt("analyze_market", {})


def test_optional_prompt_arguments():
    """Test prompt defaults and overrides."""
    text = get_prompt("trading_session").messages[0].content.text
    assert "moderate risk" in text

    text = get_prompt("trading_session", {"symbol": "BTC-KRW", "risk": "low"}).messages[0].content.text
    assert "BTC-KRW" in text
    assert "low risk" in text


def test_unknown_prompt():
    """Test rendering an unknown prompt."""
    with pytest.raises(ValueError, match="Unknown prompt"):
        get_prompt("get_rich_quick")
