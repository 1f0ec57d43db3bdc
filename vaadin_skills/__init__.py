"""vaadin-skills — Vaadin skill corpus tooling and documentation MCP server."""

__version__ = "0.3.0"
