"""MCP tools for the ClawDaddy domain registrar API."""

__version__ = "1.0.0"
