from dataclasses import dataclass
from typing import Optional, Tuple

CHROME_DEVTOOLS_SERVER = "chrome-devtools"

# CHROME_PATH value set by the container image
CONTAINER_CHROME_PATH = "/usr/bin/chromium"

BASE_ARGS: Tuple[str, ...] = (
    "-y",
    "chrome-devtools-mcp@latest",
    "--headless",
    "--isolated",
    "--no-category-emulation",
    "--no-category-performance",
    "--no-category-network",
)

CONTAINER_ARGS: Tuple[str, ...] = (
    f"--executable-path={CONTAINER_CHROME_PATH}",
    "--chrome-arg=--no-sandbox",
    "--chrome-arg=--disable-setuid-sandbox",
    "--chrome-arg=--disable-dev-shm-usage",
    "--chrome-arg=--disable-gpu",
)


@dataclass(frozen=True)
class McpServerConfig:
    command: str
    args: Tuple[str, ...]
    type: str = "stdio"


def build_chrome_devtools_args(chrome_path: Optional[str]) -> Tuple[str, ...]:
    """Returns the npx arguments that start chrome-devtools-mcp.

    Inside the container Chromium lives at a fixed path and cannot use the
    OS sandbox, so it gets the explicit path plus the sandbox flags. Locally
    chrome-devtools-mcp finds Chrome on its own.
    """
    if chrome_path == CONTAINER_CHROME_PATH:
        return BASE_ARGS + CONTAINER_ARGS
    return BASE_ARGS


def chrome_devtools_server(chrome_path: Optional[str]) -> McpServerConfig:
    return McpServerConfig(command="npx", args=build_chrome_devtools_args(chrome_path))
