"""Entry point for ``adk web`` / ``adk run``: exposes ``root_agent`` and ``app``."""

from dotenv import load_dotenv

from recipe_finder.config import Settings
from recipe_finder.options import get_options
from recipe_finder.runtime import build_agent, build_app, build_toolsets

load_dotenv()

settings = Settings.from_env()
options = get_options(standalone=True, model=settings.model, chrome_path=settings.chrome_path)

root_agent = build_agent(options, settings, build_toolsets(options, settings))

app = build_app(root_agent)
