"""Shared fixtures: a stub pex.bot backend behind httpx.MockTransport."""

import json
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from pexbot_mcp import PexBot

BASE_URL = "https://pex.test/api/v1"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class StubBackend:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int = 200, **kwargs) -> None:
        self.routes[(method, path)] = httpx.Response(status_code, **kwargs)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.decode().removeprefix("/api/v1")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"detail": f"No route for {request.method} {path}"})
        if callable(route):
            return route(request)
        return route

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and r.url.raw_path.decode().removeprefix("/api/v1") == path
        ]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


@pytest.fixture
def backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def make_client(backend):
    def factory(**kwargs) -> PexBot:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
        return PexBot(base_url=BASE_URL, http_client=http_client, **kwargs)

    return factory
