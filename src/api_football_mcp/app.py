"""FastAPI application serving the MCP tools over HTTP and SSE."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from api_football_mcp.config import (
    PROTOCOL_VERSION,
    SERVER_VERSION,
    Settings,
    configure_logging,
    get_settings,
)
from api_football_mcp.dispatcher import PARSE_ERROR, DispatchResult, McpDispatcher, jsonrpc_error
from api_football_mcp.sessions import SessionStore, new_session_id
from api_football_mcp.sse import HeartbeatStream
from api_football_mcp.tools import TOOL_NAMES, ToolContext, tool_descriptors
from api_football_mcp.upstream import ApiFootballClient

logger = logging.getLogger("api_football_mcp")

SESSION_HEADER = "mcp-session-id"


def _respond(result: DispatchResult, session_id: Optional[str] = None) -> Response:
    headers = {SESSION_HEADER: session_id} if session_id else None
    if result.payload is None:
        return Response(status_code=result.status_code, headers=headers)
    return JSONResponse(content=result.payload, status_code=result.status_code, headers=headers)


def create_app(settings: Optional[Settings] = None, client: Optional[ApiFootballClient] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    client = client or ApiFootballClient.from_settings(settings)
    sessions = SessionStore(settings.session_ttl_seconds, settings.session_max_entries)
    dispatcher = McpDispatcher(ToolContext(client=client, settings=settings), sessions)

    app = FastAPI(
        title="API-Football MCP",
        description="MCP server exposing API-Football fixtures, teams, form and odds.",
        version=SERVER_VERSION,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.sessions = sessions
    app.state.dispatcher = dispatcher

    @app.on_event("startup")
    async def startup_event():
        logger.info("API-Football MCP server starting up...")
        logger.info(f"Upstream: {settings.base_url}")
        logger.info(f"Available tools: {TOOL_NAMES}")
        if not settings.api_key:
            logger.warning("API_FOOTBALL_KEY is not set; upstream calls will be rejected")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("API-Football MCP server shutting down...")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f}ms)")
        return response

    def sse_response(request: Request, session_id: Optional[str] = None) -> StreamingResponse:
        stream = HeartbeatStream(request, tool_descriptors(), settings.heartbeat_seconds)
        headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
        if session_id:
            headers[SESSION_HEADER] = session_id
        return StreamingResponse(stream.events(), media_type="text/event-stream", headers=headers)

    # Health check endpoints
    @app.get("/")
    def read_root():
        return {
            "status": "OK",
            "message": "API-Football MCP Server is running",
            "version": SERVER_VERSION,
            "tools": TOOL_NAMES,
        }

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": "API-Football MCP",
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/mcp")
    async def mcp_get(request: Request):
        """Tool discovery: JSON by default, an SSE stream when the client asks for one."""
        session_id = request.headers.get(SESSION_HEADER) or new_session_id()
        if "text/event-stream" in request.headers.get("accept", ""):
            return sse_response(request, session_id)
        return JSONResponse(
            content={"protocolVersion": PROTOCOL_VERSION, "tools": tool_descriptors()},
            headers={SESSION_HEADER: session_id},
        )

    @app.post("/mcp")
    async def jsonrpc_endpoint(request: Request):
        """Generic JSON-RPC endpoint for all MCP operations"""
        session_id = request.headers.get(SESSION_HEADER) or new_session_id()
        try:
            body = await request.json()
        except ValueError:
            return _respond(jsonrpc_error(None, PARSE_ERROR, "Parse error"), session_id)

        # Tool handlers block on requests; keep them off the event loop
        result = await asyncio.to_thread(dispatcher.handle, body, session_id)
        return _respond(result, session_id)

    @app.delete("/mcp")
    async def mcp_delete(request: Request):
        session_id = request.headers.get(SESSION_HEADER)
        if session_id:
            sessions.forget(session_id)
        return {"status": "ok", "message": "Session terminated"}

    @app.get("/sse")
    async def sse_endpoint(request: Request):
        return sse_response(request)

    @app.get("/tools")
    async def tools_list_get():
        """Lightweight endpoint for tool discovery"""
        return {"protocolVersion": PROTOCOL_VERSION, "tools": tool_descriptors()}

    @app.post("/tools/list")
    async def tools_list_post():
        return {"jsonrpc": "2.0", "result": {"tools": tool_descriptors()}, "id": 1}

    @app.post("/tools/call")
    async def tools_call(request: Request):
        """Bare ``{name, arguments}`` body; answers with ``{content}`` or ``{error}``."""
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(content={"error": "Parse error"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse(content={"error": "Request body must be an object"}, status_code=400)

        envelope = {"jsonrpc": "2.0", "id": None, "method": "tools/call", "params": body}
        result = await asyncio.to_thread(dispatcher.handle, envelope)
        if "error" in result.payload:
            return JSONResponse(content={"error": result.payload["error"]["message"]},
                                status_code=result.status_code)
        return result.payload["result"]

    return app


app = create_app()


def main():
    settings = get_settings()
    import uvicorn
    logger.info(f"Starting API-Football MCP server on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
