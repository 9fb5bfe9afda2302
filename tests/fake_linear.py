"""A fake Linear endpoint for tests, built on httpx.MockTransport."""

from collections.abc import Callable
from typing import Any

import httpx
import orjson

from linctl.constants import API_ENDPOINT

Handler = Callable[[dict[str, Any]], httpx.Response]


def gql_data(data: Any) -> httpx.Response:
    """Build a successful GraphQL envelope."""
    return httpx.Response(200, content=orjson.dumps({"data": data}))


def connection(
    nodes: list[Any],
    has_next: bool = False,
    cursor: str | None = None,
) -> dict[str, Any]:
    """Build a ``{nodes, pageInfo}`` connection."""
    return {"nodes": nodes, "pageInfo": {"hasNextPage": has_next, "endCursor": cursor}}


def issue_payload(
    identifier: str = "ENG-1",
    title: str = "Fix login",
    **overrides: Any,
) -> dict[str, Any]:
    """Return an issue node as the API sends it."""
    payload: dict[str, Any] = {
        "id": f"id-{identifier.lower()}",
        "identifier": identifier,
        "title": title,
        "description": None,
        "priority": 2,
        "state": {
            "id": "st-todo",
            "name": "Todo",
            "color": "#e2e2e2",
            "type": "unstarted",
        },
        "assignee": {"id": "u-1", "name": "Ada", "email": "ada@example.com"},
        "team": {"id": "team-eng", "key": "ENG", "name": "Engineering"},
        "project": None,
        "cycle": None,
        "labels": {"nodes": []},
        "parent": None,
        "createdAt": "2024-01-15T10:30:00.000Z",
        "updatedAt": "2024-01-16T08:00:00.000Z",
    }
    payload.update(overrides)
    return payload


WORKFLOW_STATES = {
    "workflowStates": {
        "nodes": [
            {"id": "st-backlog", "name": "Backlog", "color": "#bec2c8", "type": "backlog"},
            {"id": "st-todo", "name": "Todo", "color": "#e2e2e2", "type": "unstarted"},
            {"id": "st-progress", "name": "In Progress", "color": "#f2c94c", "type": "started"},
            {"id": "st-done", "name": "Done", "color": "#5e6ad2", "type": "completed"},
        ],
    },
}


class FakeLinear:
    """In-memory stand-in for the GraphQL endpoint and asset hosts.

    GraphQL requests are routed on ``operationName``; asset GET/PUT requests
    on the full URL. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Handler] = {}
        self.assets: dict[str, httpx.Response] = {}
        self.payloads: list[dict[str, Any]] = []
        self.asset_requests: list[httpx.Request] = []

    def on(
        self,
        operation: str,
        data: Any = None,
        handler: Handler | None = None,
    ) -> None:
        """Answer *operation* with *data*, or with a variables -> response handler."""
        self.routes[operation] = handler or (lambda _variables: gql_data(data))

    def asset(self, url: str, status: int = 200, content: bytes = b"") -> None:
        """Serve *content* (or an error *status*) for GET/PUT on *url*."""
        self.assets[url] = httpx.Response(status, content=content)

    def calls(self, operation: str) -> list[dict[str, Any]]:
        """Variables of every request made for *operation*."""
        return [
            p.get("variables") or {}
            for p in self.payloads
            if p.get("operationName") == operation
        ]

    @property
    def operations(self) -> list[str]:
        return [p["operationName"] for p in self.payloads]

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and str(request.url) == API_ENDPOINT:
            payload = orjson.loads(request.content)
            self.payloads.append(payload)
            name = payload["operationName"]
            route = self.routes.get(name)
            if route is None:
                return httpx.Response(400, text=f"unexpected operation {name}")
            return route(payload.get("variables") or {})

        self.asset_requests.append(request)
        response = self.assets.get(str(request.url))
        if response is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(response.status_code, content=response.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)
