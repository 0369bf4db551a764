"""
Free-text search and document fetch over API-Football.

``search`` classifies a query with a closed keyword table to decide which
upstream endpoint to hit; ``fetch`` resolves an id produced by ``search`` back
to a single document.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from api_football_mcp.results import ToolResult, current_season, entries, pick
from api_football_mcp.upstream import UpstreamError

logger = logging.getLogger("api_football_mcp")

DEFAULT_LEAGUE = "39"

# Longest names first so "champions league" wins over a bare "league" match
LEAGUE_KEYWORDS: List[Tuple[str, str]] = [
    ("champions league", "2"),
    ("europa league", "3"),
    ("premier league", "39"),
    ("la liga", "140"),
    ("laliga", "140"),
    ("serie a", "135"),
    ("bundesliga", "78"),
    ("ligue 1", "61"),
    ("epl", "39"),
    ("mls", "253"),
]

FIXTURE_KEYWORDS = ("fixture", "fixtures", "match", "matches", "game", "games")
TEAM_KEYWORDS = ("team", "teams", "club", "clubs")


@dataclass(frozen=True)
class SearchIntent:
    kind: str
    endpoint: str
    params: Dict[str, str] = field(default_factory=dict)


def _has_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def _strip_keywords(query: str, words) -> str:
    cleaned = query
    for word in words:
        cleaned = re.sub(rf"\b{re.escape(word)}\b", " ", cleaned, flags=re.IGNORECASE)
    return " ".join(cleaned.split())


def classify_query(query: str) -> SearchIntent:
    text = query.lower()

    league_id = None
    league_word = None
    for keyword, lid in LEAGUE_KEYWORDS:
        if _has_word(text, keyword):
            league_id, league_word = lid, keyword
            break

    wants_team = any(_has_word(text, w) for w in TEAM_KEYWORDS)
    wants_fixture = any(_has_word(text, w) for w in FIXTURE_KEYWORDS)

    if wants_fixture or (league_id and not wants_team):
        return SearchIntent(
            kind="fixture",
            endpoint="/fixtures",
            params={"league": league_id or DEFAULT_LEAGUE, "next": "10"},
        )

    noise = list(TEAM_KEYWORDS) + ([league_word] if league_word else [])
    term = _strip_keywords(query, noise)
    if not term and league_id:
        # "premier league teams": list the league's clubs for the current season
        return SearchIntent(
            kind="team",
            endpoint="/teams",
            params={"league": league_id, "season": str(current_season())},
        )
    return SearchIntent(kind="team", endpoint="/teams", params={"search": term or query.strip()})


def _team_document(item: Dict[str, Any]) -> Dict[str, Any]:
    team_id = pick(item, "team", "id")
    name = pick(item, "team", "name")
    country = pick(item, "team", "country")
    founded = pick(item, "team", "founded")
    venue = pick(item, "venue", "name")
    city = pick(item, "venue", "city")
    return {
        "id": f"team:{team_id}",
        "title": name,
        "text": f"{name} ({country}), founded {founded}. Home ground: {venue}, {city}.",
        "url": pick(item, "team", "logo", default=None),
    }


def _fixture_document(item: Dict[str, Any]) -> Dict[str, Any]:
    fixture_id = pick(item, "fixture", "id")
    home = pick(item, "teams", "home", "name")
    away = pick(item, "teams", "away", "name")
    title = f"{home} vs {away}"
    league = pick(item, "league", "name")
    kickoff = pick(item, "fixture", "date")
    status = pick(item, "fixture", "status", "long")
    venue = pick(item, "fixture", "venue", "name")
    return {
        "id": f"fixture:{fixture_id}",
        "title": title,
        "text": f"{title}, {league}. Kick-off {kickoff}, status {status}, venue {venue}.",
        "url": pick(item, "league", "logo", default=None),
    }


def search(arguments: Dict[str, Any], context) -> ToolResult:
    query = str(arguments.get("query", "")).strip()
    intent = classify_query(query)
    logger.info(f"search '{query}' classified as {intent.kind} -> {intent.endpoint}")

    try:
        data = context.client.get(intent.endpoint, intent.params)
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    to_document = _team_document if intent.kind == "team" else _fixture_document
    results = [to_document(item) for item in entries(data, context.settings.result_limit)]
    return ToolResult.ok({"results": results})


def parse_document_id(raw: Any) -> Optional[Tuple[str, str]]:
    """Split ``team:33`` / ``fixture:1035`` into (kind, id); a bare number is a team."""
    value = str(raw).strip()
    if value.isdigit():
        return "team", value
    kind, sep, ident = value.partition(":")
    if sep and kind in ("team", "fixture") and ident.isdigit():
        return kind, ident
    return None


def fetch(arguments: Dict[str, Any], context) -> ToolResult:
    parsed = parse_document_id(arguments.get("id", ""))
    if parsed is None:
        return ToolResult.failure(f"Unrecognised document id: {arguments.get('id')!r}")
    kind, ident = parsed

    endpoint = "/teams" if kind == "team" else "/fixtures"
    try:
        data = context.client.get(endpoint, {"id": ident})
    except UpstreamError as e:
        return ToolResult.failure(str(e))

    items = entries(data, 1)
    if not items:
        return ToolResult.failure(f"No {kind} found with id {ident}")
    item = items[0]

    if kind == "team":
        document = _team_document(item)
        document["metadata"] = {
            "country": pick(item, "team", "country"),
            "founded": pick(item, "team", "founded"),
            "code": pick(item, "team", "code"),
            "venue": pick(item, "venue", "name"),
            "city": pick(item, "venue", "city"),
            "capacity": pick(item, "venue", "capacity"),
        }
    else:
        document = _fixture_document(item)
        document["metadata"] = {
            "league": pick(item, "league", "name"),
            "round": pick(item, "league", "round"),
            "status": pick(item, "fixture", "status", "long"),
            "referee": pick(item, "fixture", "referee"),
            "score": {
                "home": pick(item, "goals", "home"),
                "away": pick(item, "goals", "away"),
            },
        }
    return ToolResult.ok(document)
