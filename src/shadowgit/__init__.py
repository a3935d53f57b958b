"""ShadowGit MCP server: read-only git access and checkpoints for AI assistants."""

__version__ = "1.1.2"
