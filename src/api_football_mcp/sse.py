"""Server-Sent Events stream: the tool manifest once, then periodic pings."""

import asyncio
import json
import logging
import time
from typing import Any, AsyncIterator, Dict, List

logger = logging.getLogger("api_football_mcp")


def format_event(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class HeartbeatStream:
    """
    One SSE connection.

    ``events()`` yields the manifest frame, then a ping frame every
    ``interval`` seconds. The loop stops as soon as the client is gone, the
    response task is cancelled or a transport error escapes the write; after
    that ``active`` is False and no further frame is produced.
    """

    def __init__(self, request, tools: List[Dict[str, Any]], interval: float = 25.0):
        self.request = request
        self.tools = tools
        self.interval = interval
        self.active = False
        self.pings_sent = 0

    async def _client_gone(self) -> bool:
        return await self.request.is_disconnected()

    async def events(self) -> AsyncIterator[str]:
        self.active = True
        logger.info("SSE stream opened")
        try:
            yield format_event("tools", {"tools": self.tools})
            while True:
                await asyncio.sleep(self.interval)
                if await self._client_gone():
                    break
                self.pings_sent += 1
                yield format_event("ping", {"type": "ping", "timestamp": int(time.time())})
        finally:
            self.active = False
            logger.info(f"SSE stream closed after {self.pings_sent} pings")
