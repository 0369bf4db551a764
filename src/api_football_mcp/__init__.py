"""API-Football MCP Server package."""

__all__ = ["create_app", "create_server"]


def __getattr__(name: str):
    """Lazy import so ``python -m api_football_mcp.app`` does not import itself twice."""
    if name == "create_app":
        from api_football_mcp.app import create_app
        return create_app
    if name == "create_server":
        from api_football_mcp.server import create_server
        return create_server
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
