"""MCP tool servers for travel planning, restaurant reservations and meeting summaries."""

__version__ = "1.0.0"
