from importlib import resources

PROMPT_VERSION = "v1"


def load_prompt(version: str = PROMPT_VERSION) -> str:
    """Reads the operating procedure for the given version.

    Raises FileNotFoundError for an unknown version.
    """
    asset = resources.files("recipe_finder") / "prompts" / f"recipe_finder_{version}.md"
    if not asset.is_file():
        raise FileNotFoundError(f"No recipe finder prompt for version {version!r}")
    return asset.read_text(encoding="utf-8")


SYSTEM_PROMPT = load_prompt()
