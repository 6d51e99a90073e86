"""Recipe Finder: an ADK agent that browses AllRecipes through chrome-devtools-mcp."""

__version__ = "0.1.0"
