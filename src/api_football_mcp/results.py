"""Result-or-error type shared by every tool handler, plus projection helpers."""

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

NA = "N/A"


@dataclass(frozen=True)
class ToolResult:
    payload: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, payload: Any) -> "ToolResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(error=message)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def text(self) -> str:
        if self.is_error:
            return f"Error: {self.error}"
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, indent=2, ensure_ascii=False, default=str)

    def content(self) -> List[Dict[str, str]]:
        return [{"type": "text", "text": self.text()}]


def pick(obj: Any, *path: str, default: Any = NA) -> Any:
    """Walk nested dicts, returning ``default`` when any step is missing or null."""
    current = obj
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def entries(data: Dict[str, Any], limit: Optional[int] = None) -> List[Any]:
    """The upstream ``response`` array, truncated to ``limit`` entries."""
    response = data.get("response")
    if not isinstance(response, list):
        return []
    return response[:limit] if limit is not None else response


def current_season(today: Optional[date] = None) -> int:
    """European seasons start in summer; before July the season is last year's."""
    today = today or date.today()
    return today.year if today.month >= 7 else today.year - 1
