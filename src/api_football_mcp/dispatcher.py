"""JSON-RPC dispatch for the MCP methods served over HTTP."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from api_football_mcp.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from api_football_mcp.sessions import SessionStore
from api_football_mcp.tools import TOOLS, ToolContext, call_tool, missing_arguments, tool_descriptors

logger = logging.getLogger("api_football_mcp")

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

HTTP_STATUS_FOR_ERROR = {
    PARSE_ERROR: 400,
    INVALID_REQUEST: 400,
    METHOD_NOT_FOUND: 400,
    INVALID_PARAMS: 400,
    INTERNAL_ERROR: 500,
}

# Gateways sometimes namespace tool names, e.g. "api-football-mcp-search_teams"
TOOL_NAME_PREFIX = f"{SERVER_NAME}-"


@dataclass
class DispatchResult:
    payload: Optional[Dict[str, Any]]
    status_code: int = 200


def jsonrpc_result(rpc_id: Any, result: Any) -> DispatchResult:
    return DispatchResult({"jsonrpc": "2.0", "id": rpc_id, "result": result})


def jsonrpc_error(rpc_id: Any, code: int, message: str) -> DispatchResult:
    return DispatchResult(
        {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}},
        status_code=HTTP_STATUS_FOR_ERROR.get(code, 200),
    )


def _tool_arguments(params: Dict[str, Any]) -> Dict[str, Any]:
    # Standard MCP uses "arguments"; some clients send "parameters" or flatten them
    arguments = params.get("arguments")
    if arguments is None:
        arguments = params.get("parameters")
    if arguments is None:
        arguments = {k: v for k, v in params.items() if k != "name"}
    if not isinstance(arguments, dict):
        return {}
    return arguments


class McpDispatcher:
    def __init__(self, context: ToolContext, sessions: SessionStore):
        self.context = context
        self.sessions = sessions

    def handle(self, body: Any, session_id: Optional[str] = None) -> DispatchResult:
        """Route one JSON-RPC request body to its MCP method."""
        if not isinstance(body, dict):
            return jsonrpc_error(None, INVALID_REQUEST, "Invalid Request")

        rpc_id = body.get("id")
        # A body without "jsonrpc" is accepted as the bare REST-ish form
        if "jsonrpc" in body and body.get("jsonrpc") != "2.0":
            return jsonrpc_error(rpc_id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'")

        method = body.get("method")
        if not isinstance(method, str) or not method:
            return jsonrpc_error(rpc_id, INVALID_REQUEST, "Invalid Request: missing method")

        params = body.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return jsonrpc_error(rpc_id, INVALID_PARAMS, "Invalid params: params must be an object")

        logger.info(f"Received JSON-RPC request: {method} with ID {rpc_id}")

        if method.startswith("notifications/"):
            return DispatchResult(None, status_code=202)

        try:
            if method == "initialize":
                return self._initialize(rpc_id, params, session_id)
            elif method == "ping":
                return jsonrpc_result(rpc_id, {})
            elif method == "shutdown":
                return jsonrpc_result(rpc_id, None)
            elif method == "tools/list":
                return jsonrpc_result(rpc_id, {"tools": tool_descriptors()})
            elif method == "tools/call":
                return self._call(rpc_id, params)
            elif method in TOOLS:
                return self._call(rpc_id, {"name": method, "arguments": params})
            else:
                return jsonrpc_error(rpc_id, METHOD_NOT_FOUND, "Method not found")
        except Exception as e:
            logger.exception(f"Error handling {method}: {str(e)}")
            return jsonrpc_error(rpc_id, INTERNAL_ERROR, str(e))

    def _initialize(self, rpc_id: Any, params: Dict[str, Any], session_id: Optional[str]) -> DispatchResult:
        if session_id:
            self.sessions.remember(
                session_id,
                capabilities=params.get("capabilities"),
                client_info=params.get("clientInfo"),
            )
        return jsonrpc_result(rpc_id, {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        })

    def _call(self, rpc_id: Any, params: Dict[str, Any]) -> DispatchResult:
        raw_name = params.get("name")
        name = raw_name
        if isinstance(name, str) and name.startswith(TOOL_NAME_PREFIX):
            name = name[len(TOOL_NAME_PREFIX):]

        if not isinstance(name, str) or name not in TOOLS:
            logger.info(f"Unknown tool requested: {raw_name!r}")
            return jsonrpc_error(rpc_id, METHOD_NOT_FOUND, "Method not found")

        arguments = _tool_arguments(params)
        missing = missing_arguments(name, arguments)
        if missing:
            return jsonrpc_error(
                rpc_id, INVALID_PARAMS,
                f"Invalid params: missing required argument(s): {', '.join(missing)}",
            )

        result = call_tool(name, arguments, self.context)
        if result.is_error:
            return jsonrpc_error(rpc_id, INTERNAL_ERROR, result.error)
        return jsonrpc_result(rpc_id, {"content": result.content()})
