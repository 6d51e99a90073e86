import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from recipe_finder.config import DEFAULT_MODEL
from recipe_finder.launch import CHROME_DEVTOOLS_SERVER, McpServerConfig, chrome_devtools_server
from recipe_finder.prompt import SYSTEM_PROMPT
from recipe_finder.tools import ALLOWED_TOOLS

# Upper bound on model calls per request; the only guard against runaway loops.
MAX_TURNS = 50


@dataclass(frozen=True)
class AgentOptions:
    env: Mapping[str, str]
    system_prompt: str
    model: str
    allowed_tools: Tuple[str, ...]
    max_turns: int = MAX_TURNS
    mcp_servers: Optional[Dict[str, McpServerConfig]] = None


def get_options(
    standalone: bool = False,
    env: Optional[Mapping[str, str]] = None,
    model: Optional[str] = None,
    chrome_path: Optional[str] = None,
) -> AgentOptions:
    """Assembles the agent options.

    Standalone mode also declares the chrome-devtools MCP server so the runtime
    starts the browser itself. Embedded callers leave it out and attach their
    own connection to a running server. ``chrome_path`` is the container
    signal for the browser launch; it falls back to CHROME_PATH in ``env``.
    """
    env = dict(os.environ if env is None else env)

    mcp_servers = None
    if standalone:
        if chrome_path is None:
            chrome_path = env.get("CHROME_PATH")
        mcp_servers = {CHROME_DEVTOOLS_SERVER: chrome_devtools_server(chrome_path)}

    return AgentOptions(
        env=env,
        system_prompt=SYSTEM_PROMPT,
        model=model or DEFAULT_MODEL,
        allowed_tools=ALLOWED_TOOLS,
        max_turns=MAX_TURNS,
        mcp_servers=mcp_servers,
    )
