from typing import Tuple

from recipe_finder.launch import CHROME_DEVTOOLS_SERVER

# chrome-devtools-mcp operations the agent may call. Anything else is refused.
ALLOWED_TOOLS: Tuple[str, ...] = (
    # input
    "click",
    "fill",
    "fill_form",
    "hover",
    "press_key",
    # navigation and tabs
    "navigate_page",
    "new_page",
    "list_pages",
    "select_page",
    "close_page",
    "wait_for",
    # inspection
    "take_screenshot",
    "take_snapshot",
)

_ALLOWED = frozenset(ALLOWED_TOOLS)


def qualified_tool_name(name: str, server: str = CHROME_DEVTOOLS_SERVER) -> str:
    """mcp__<server>__<name>, the form used in logs."""
    return f"mcp__{server}__{name}"


def bare_tool_name(name: str, server: str = CHROME_DEVTOOLS_SERVER) -> str:
    prefix = qualified_tool_name("", server)
    if name.startswith(prefix):
        return name[len(prefix):]
    return name


def is_allowed(name: str) -> bool:
    return bare_tool_name(name) in _ALLOWED
