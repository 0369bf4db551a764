import asyncio
import logging

from fastapi import Request

from api_football_mcp.app import SESSION_HEADER, create_app
from api_football_mcp.config import Settings
from api_football_mcp.tools import TOOL_NAMES

from conftest import BASE_URL, team_item, upstream


def disconnected_request(path, headers):
    """A GET request whose client has already gone away."""
    async def receive():
        return {"type": "http.disconnect"}

    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [(k.encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope, receive)


def get_endpoint(app, path):
    for route in app.routes:
        if getattr(route, "path", None) == path and "GET" in getattr(route, "methods", ()):
            return route.endpoint
    raise AssertionError(f"no GET route for {path}")


def drain(response):
    async def run():
        return [frame async for frame in response.body_iterator]
    return asyncio.run(run())


def test_root_health(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["message"] == "API-Football MCP Server is running"
    assert body["tools"] == TOOL_NAMES


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_tools_endpoint(client):
    response = client.get("/tools")

    assert response.status_code == 200
    assert len(response.json()["tools"]) == len(TOOL_NAMES)


def test_get_mcp_returns_json_manifest(client):
    response = client.get("/mcp")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert [t["name"] for t in response.json()["tools"]] == TOOL_NAMES
    assert response.headers[SESSION_HEADER]


def test_post_mcp_search_teams(client, fake_session):
    fake_session.reply("/teams", upstream([team_item(33, "Manchester United"), team_item(50, "Manchester City")]))

    response = client.post("/mcp", json={
        "jsonrpc": "2.0",
        "method": "tools/call",
        "params": {"name": "search_teams", "arguments": {"query": "Manchester"}},
        "id": 1,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    text = body["result"]["content"][0]["text"]
    assert "Manchester United" in text and "Manchester City" in text


def test_post_mcp_unknown_tool(client):
    response = client.post("/mcp", json={
        "jsonrpc": "2.0",
        "method": "tools/call",
        "params": {"name": "nonexistent", "arguments": {}},
        "id": 2,
    })

    assert response.json() == {"jsonrpc": "2.0", "id": 2, "error": {"code": -32601, "message": "Method not found"}}


def test_post_mcp_invalid_json(client):
    response = client.post("/mcp", content=b"{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == -32700


def test_session_header_is_generated_and_echoed(client):
    generated = client.post("/mcp", json={"jsonrpc": "2.0", "method": "ping", "id": 1})
    assert len(generated.headers[SESSION_HEADER]) == 32

    echoed = client.post("/mcp", json={"jsonrpc": "2.0", "method": "ping", "id": 1},
                         headers={SESSION_HEADER: "client-chosen"})
    assert echoed.headers[SESSION_HEADER] == "client-chosen"


def test_initialize_then_delete_session(client):
    headers = {SESSION_HEADER: "abc123"}
    client.post("/mcp", json={"jsonrpc": "2.0", "method": "initialize", "params": {"capabilities": {}}, "id": 1},
                headers=headers)
    sessions = client.app.state.sessions
    assert "abc123" in sessions

    response = client.delete("/mcp", headers=headers)

    assert response.json()["status"] == "ok"
    assert "abc123" not in sessions


def test_notification_returns_202(client):
    response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 202
    assert response.content == b""


def test_tools_call_bare_body(client, fake_session):
    fake_session.reply("/teams", upstream([team_item(42, "Arsenal")]))

    response = client.post("/tools/call", json={"name": "search_teams", "arguments": {"name": "Arsenal"}})

    assert response.status_code == 200
    assert "Arsenal" in response.json()["content"][0]["text"]


def test_tools_call_bare_body_errors(client):
    unknown = client.post("/tools/call", json={"name": "nope", "arguments": {}})
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Method not found"}

    missing = client.post("/tools/call", json={"name": "fetch", "arguments": {}})
    assert missing.status_code == 400
    assert "id" in missing.json()["error"]


def test_tools_list_post(client):
    response = client.post("/tools/list")

    assert response.json()["result"]["tools"][0]["name"] == TOOL_NAMES[0]


def test_create_app_configures_package_logger(api_client):
    package_logger = logging.getLogger("api_football_mcp")
    previous = package_logger.level
    try:
        create_app(settings=Settings(api_key="k", base_url=BASE_URL, log_level="DEBUG"), client=api_client)
        assert package_logger.getEffectiveLevel() == logging.DEBUG

        create_app(settings=Settings(api_key="k", base_url=BASE_URL, log_level="WARNING"), client=api_client)
        assert package_logger.getEffectiveLevel() == logging.WARNING
    finally:
        package_logger.setLevel(previous)


def test_get_mcp_with_event_stream_accept_opens_sse(settings, api_client):
    app = create_app(settings=settings, client=api_client)
    endpoint = get_endpoint(app, "/mcp")

    request = disconnected_request("/mcp", {"accept": "text/event-stream", SESSION_HEADER: "abc123"})
    response = asyncio.run(endpoint(request))

    assert response.media_type == "text/event-stream"
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers[SESSION_HEADER] == "abc123"
    assert response.headers["cache-control"] == "no-cache"

    frames = drain(response)
    assert len(frames) == 1
    assert frames[0].startswith("event: tools\n")
    assert all(name in frames[0] for name in TOOL_NAMES)


def test_get_mcp_event_stream_generates_session_id(settings, api_client):
    app = create_app(settings=settings, client=api_client)
    endpoint = get_endpoint(app, "/mcp")

    response = asyncio.run(endpoint(disconnected_request("/mcp", {"accept": "application/json, text/event-stream"})))

    assert response.media_type == "text/event-stream"
    assert response.headers[SESSION_HEADER]
    assert drain(response)[0].startswith("event: tools\n")


def test_sse_route_streams_manifest_first(settings, api_client):
    app = create_app(settings=settings, client=api_client)
    endpoint = get_endpoint(app, "/sse")

    response = asyncio.run(endpoint(disconnected_request("/sse", {"accept": "text/event-stream"})))

    assert response.media_type == "text/event-stream"
    assert SESSION_HEADER not in response.headers
    frames = drain(response)
    assert len(frames) == 1
    assert frames[0].startswith("event: tools\n")
