import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/anthropic/claude-3.5-haiku"
DEFAULT_MCP_TIMEOUT = 30.0
DEFAULT_EVENT_LOG = "agent_log.jsonl"


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (and .env, once loaded)."""

    api_key: Optional[str] = None
    api_base: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    mcp_timeout: float = DEFAULT_MCP_TIMEOUT
    event_log: str = DEFAULT_EVENT_LOG
    chrome_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            environ = os.environ

        raw_timeout = environ.get("RECIPE_FINDER_MCP_TIMEOUT")
        try:
            mcp_timeout = float(raw_timeout) if raw_timeout else DEFAULT_MCP_TIMEOUT
        except ValueError:
            raise ValueError(
                f"RECIPE_FINDER_MCP_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from None

        return cls(
            api_key=environ.get("OPENROUTER_API_KEY") or None,
            api_base=environ.get("RECIPE_FINDER_API_BASE") or DEFAULT_API_BASE,
            model=environ.get("RECIPE_FINDER_MODEL") or DEFAULT_MODEL,
            mcp_timeout=mcp_timeout,
            event_log=environ.get("RECIPE_FINDER_EVENT_LOG") or DEFAULT_EVENT_LOG,
            chrome_path=environ.get("CHROME_PATH"),
        )

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ValueError("OPENROUTER_API_KEY not found")
        return self.api_key
