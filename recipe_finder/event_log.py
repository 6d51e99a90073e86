import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aiofiles

from recipe_finder.relay import RelayEvent, event_to_dict

logger = logging.getLogger(__name__)


class EventLog:
    """Appends relay events to a JSONL trajectory file, one line per event."""

    def __init__(self, path: str, session: Optional[str] = None):
        self.path = path
        self.session = session or uuid.uuid4().hex

    async def _append(self, entry: Dict[str, Any]):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session": self.session,
            **entry,
        }
        async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
            await f.write(json.dumps(entry, ensure_ascii=False) + "\n")

    async def start(self, prompt: str):
        await self._append({"type": "session_start", "prompt": prompt})
        logger.info("Logging session %s to %s", self.session, self.path)

    async def write(self, event: RelayEvent):
        await self._append(event_to_dict(event))

    async def end(self, error: Optional[BaseException] = None):
        entry: Dict[str, Any] = {"type": "session_end"}
        if error is not None:
            entry["error"] = f"{type(error).__name__}: {error}"
        await self._append(entry)
