"""
Declarative tool registry.

Each tool is a name, a description, a JSON Schema for its arguments and a
handler ``handler(arguments, context) -> ToolResult``. The HTTP dispatcher and
the stdio server both list and call tools through this module.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from api_football_mcp import search as search_tools
from api_football_mcp.results import NA, ToolResult, current_season, entries, pick
from api_football_mcp.upstream import UpstreamError

logger = logging.getLogger("api_football_mcp")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class ToolContext:
    client: Any
    settings: Any


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[[Dict[str, Any], ToolContext], ToolResult]
    aliases: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def required(self) -> List[str]:
        return list(self.input_schema.get("required", []))

    def descriptor(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }

    def normalize(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Copy alias keys (e.g. ``query`` for ``name``) onto their canonical names."""
        normalized = dict(arguments or {})
        for canonical, alternatives in self.aliases.items():
            if is_blank(normalized.get(canonical)):
                for alt in alternatives:
                    if not is_blank(normalized.get(alt)):
                        normalized[canonical] = normalized[alt]
                        break
        return normalized


def _search_teams(arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
    name = arguments["name"]
    try:
        data = context.client.get("/teams", {"search": name})
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    teams = [
        {
            "id": pick(item, "team", "id"),
            "name": pick(item, "team", "name"),
            "country": pick(item, "team", "country"),
            "founded": pick(item, "team", "founded"),
        }
        for item in entries(data, context.settings.result_limit)
    ]
    return ToolResult.ok({"message": f'Teams found matching "{name}"', "teams": teams})


def _get_upcoming_fixtures(arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = {
        "league": arguments.get("league") or search_tools.DEFAULT_LEAGUE,
        "timezone": arguments.get("timezone"),
    }
    if arguments.get("date"):
        params["date"] = arguments["date"]
        # the upstream requires a season whenever league is combined with date
        params["season"] = arguments.get("season") or str(current_season())
    else:
        params["next"] = str(arguments.get("next") or 10)

    try:
        data = context.client.get("/fixtures", params)
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    fixtures = [
        {
            "id": pick(item, "fixture", "id"),
            "date": pick(item, "fixture", "date"),
            "status": pick(item, "fixture", "status", "long"),
            "league": pick(item, "league", "name"),
            "teams": f"{pick(item, 'teams', 'home', 'name')} vs {pick(item, 'teams', 'away', 'name')}",
            "venue": pick(item, "fixture", "venue", "name"),
        }
        for item in entries(data, context.settings.result_limit)
    ]
    return ToolResult.ok({
        "message": f"Found {data.get('results', len(fixtures))} upcoming fixtures",
        "fixtures": fixtures,
    })


def _get_team_form(arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = {
        "team": arguments["team"],
        "league": arguments["league"],
        "season": arguments.get("season") or str(current_season()),
    }
    try:
        data = context.client.get("/teams/statistics", params)
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    # /teams/statistics answers with a single object rather than a list
    stats = data.get("response")
    if not isinstance(stats, dict) or not stats:
        return ToolResult.ok({"message": "No statistics available", "statistics": {}})

    form = pick(stats, "form", default="")
    summary = {
        "team": pick(stats, "team", "name"),
        "league": pick(stats, "league", "name"),
        "season": pick(stats, "league", "season"),
        "form": form or NA,
        "recent_form": form[-5:] if form else NA,
        "fixtures": {
            "played": pick(stats, "fixtures", "played", "total"),
            "wins": pick(stats, "fixtures", "wins", "total"),
            "draws": pick(stats, "fixtures", "draws", "total"),
            "loses": pick(stats, "fixtures", "loses", "total"),
        },
        "goals": {
            "for": pick(stats, "goals", "for", "total", "total"),
            "against": pick(stats, "goals", "against", "total", "total"),
            "average_for": pick(stats, "goals", "for", "average", "total"),
            "average_against": pick(stats, "goals", "against", "average", "total"),
        },
        "clean_sheets": pick(stats, "clean_sheet", "total"),
        "failed_to_score": pick(stats, "failed_to_score", "total"),
    }
    return ToolResult.ok({
        "message": "Team statistics for analysis",
        "summary": summary,
        "statistics": stats,
    })


def _matchup(item: Dict[str, Any]) -> str:
    # odds entries usually carry only the fixture id; teams show up on some plans
    teams = pick(item, "fixture", "teams", default=None) or pick(item, "teams", default=None)
    if teams:
        return f"{pick(teams, 'home', 'name')} vs {pick(teams, 'away', 'name')}"
    return f"Fixture {pick(item, 'fixture', 'id')}"


def _get_odds(arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = {
        "fixture": arguments.get("fixture"),
        "league": arguments.get("league"),
        "bookmaker": arguments.get("bookmaker"),
        "season": arguments.get("season"),
    }
    if params["league"] and not params["season"] and not params["fixture"]:
        params["season"] = str(current_season())

    try:
        data = context.client.get("/odds", params)
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    odds = []
    for item in entries(data, context.settings.odds_limit):
        bookmakers = item.get("bookmakers") or []
        odds.append({
            "fixture": _matchup(item),
            "fixture_id": pick(item, "fixture", "id"),
            "date": pick(item, "fixture", "date"),
            "bookmakers": [
                {"name": pick(bookmaker, "name"), "bets": (bookmaker.get("bets") or [])[:3]}
                for bookmaker in bookmakers[:3]
            ],
        })
    return ToolResult.ok({"message": "Betting odds found", "odds": odds})


_TOOLS = [
    Tool(
        name="get_upcoming_fixtures",
        description="Get upcoming football fixtures for betting analysis",
        input_schema={
            "type": "object",
            "properties": {
                "league": {"type": "string", "description": "League ID (e.g., 39 for Premier League, 140 for La Liga). Defaults to 39"},
                "date": {"type": "string", "description": "Date in YYYY-MM-DD format (optional, defaults to the next fixtures)"},
                "timezone": {"type": "string", "description": "Timezone (optional, defaults to UTC)"},
                "season": {"type": "string", "description": "Season year, used together with date (optional)"},
                "next": {"type": "integer", "description": "How many upcoming fixtures to ask for when no date is given", "default": 10},
            },
        },
        handler=_get_upcoming_fixtures,
    ),
    Tool(
        name="get_team_form",
        description="Get recent form and performance of a team for betting insights",
        input_schema={
            "type": "object",
            "properties": {
                "team": {"type": "string", "description": "Team ID"},
                "league": {"type": "string", "description": "League ID"},
                "season": {"type": "string", "description": "Season year (optional, defaults to current season)"},
            },
            "required": ["team", "league"],
        },
        handler=_get_team_form,
    ),
    Tool(
        name="get_odds",
        description="Get betting odds for fixtures",
        input_schema={
            "type": "object",
            "properties": {
                "fixture": {"type": "string", "description": "Fixture ID (optional)"},
                "league": {"type": "string", "description": "League ID (optional)"},
                "bookmaker": {"type": "string", "description": "Bookmaker ID (optional, e.g., 8 for bet365)"},
                "season": {"type": "string", "description": "Season year (optional, defaults to current season with league)"},
            },
        },
        handler=_get_odds,
    ),
    Tool(
        name="search_teams",
        description="Search for teams by name",
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Team name to search for"},
            },
            "required": ["name"],
        },
        handler=_search_teams,
        aliases={"name": ("query", "team")},
    ),
    Tool(
        name="search",
        description="Search football teams and fixtures. Mention a league or words like 'fixtures' or 'team' to steer the search",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Free-text search query, e.g. 'Arsenal' or 'la liga fixtures'"},
            },
            "required": ["query"],
        },
        handler=search_tools.search,
    ),
    Tool(
        name="fetch",
        description="Fetch a team or fixture document by the id returned from search",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Document id such as 'team:33' or 'fixture:1035'"},
            },
            "required": ["id"],
        },
        handler=search_tools.fetch,
    ),
]

TOOLS: Dict[str, Tool] = {tool.name: tool for tool in _TOOLS}
TOOL_NAMES: List[str] = [tool.name for tool in _TOOLS]


def tool_descriptors() -> List[Dict[str, Any]]:
    """Fresh copies of every descriptor, so callers can never mutate the manifest."""
    return [tool.descriptor() for tool in _TOOLS]


def missing_arguments(name: str, arguments: Dict[str, Any]) -> List[str]:
    tool = TOOLS[name]
    normalized = tool.normalize(arguments)
    return [key for key in tool.required if is_blank(normalized.get(key))]


def call_tool(name: str, arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
    """Run one tool. Unknown names raise KeyError; upstream failures come back as ToolResult.failure."""
    tool = TOOLS[name]
    normalized = tool.normalize(arguments)
    logger.info(f"Calling tool {name} with {normalized}")
    result = tool.handler(normalized, context)
    if result.is_error:
        logger.error(f"Tool {name} failed: {result.error}")
    return result
