#!/usr/bin/env python3
"""API-Football MCP server over stdio, using fastmcp"""

import logging
from typing import Optional

from fastmcp import FastMCP

from api_football_mcp.config import SERVER_NAME, Settings, configure_logging, get_settings
from api_football_mcp.tools import ToolContext, call_tool
from api_football_mcp.upstream import ApiFootballClient

logger = logging.getLogger("api_football_mcp")


def create_server(settings: Optional[Settings] = None, client: Optional[ApiFootballClient] = None) -> FastMCP:
    """Create a FastMCP server exposing the same tools as the HTTP app."""
    settings = settings or get_settings()
    context = ToolContext(client=client or ApiFootballClient.from_settings(settings), settings=settings)

    mcp = FastMCP(SERVER_NAME)

    def run(name: str, **arguments) -> str:
        # Errors come back as text, the way MCP SDK servers report them to the model
        return call_tool(name, arguments, context).text()

    @mcp.tool()
    def get_upcoming_fixtures(league: Optional[str] = None, date: Optional[str] = None,
                              timezone: Optional[str] = None, season: Optional[str] = None,
                              next: Optional[int] = None) -> str:
        """
        Get upcoming football fixtures for betting analysis

        Args:
            league: League ID (e.g., 39 for Premier League, 140 for La Liga). Defaults to 39
            date: Date in YYYY-MM-DD format (optional)
            timezone: Timezone (optional, defaults to UTC)
            season: Season year, used together with date (optional)
            next: How many upcoming fixtures to ask for when no date is given
        """
        return run("get_upcoming_fixtures", league=league, date=date, timezone=timezone,
                   season=season, next=next)

    @mcp.tool()
    def get_team_form(team: str, league: str, season: Optional[str] = None) -> str:
        """Get recent form and performance of a team for betting insights"""
        return run("get_team_form", team=team, league=league, season=season)

    @mcp.tool()
    def get_odds(fixture: Optional[str] = None, league: Optional[str] = None,
                 bookmaker: Optional[str] = None, season: Optional[str] = None) -> str:
        """Get betting odds for fixtures (bookmaker 8 is bet365)"""
        return run("get_odds", fixture=fixture, league=league, bookmaker=bookmaker, season=season)

    @mcp.tool()
    def search_teams(name: str) -> str:
        """Search for teams by name"""
        return run("search_teams", name=name)

    @mcp.tool()
    def search(query: str) -> str:
        """Search football teams and fixtures, e.g. 'Arsenal' or 'la liga fixtures'"""
        return run("search", query=query)

    @mcp.tool()
    def fetch(id: str) -> str:
        """Fetch a team or fixture document by the id returned from search"""
        return run("fetch", id=id)

    return mcp


def main():
    """Main entry point for the stdio MCP server"""
    configure_logging(get_settings())
    logger.info("Starting API-Football MCP server (stdio)")
    server = create_server()
    server.run()


if __name__ == "__main__":
    main()
