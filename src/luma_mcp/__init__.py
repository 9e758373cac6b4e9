"""
Luma MCP Server

Exposes the Luma event-management API as MCP tools: browsing events and
guests, updating event details behind a confirmation step, exporting guest
rosters to CSV, and switching between several calendars' API keys.
"""

__version__ = "1.2.0"
__author__ = "Luma MCP Team"
__description__ = "MCP server for Luma events, guests and guest list exports"

# Server configuration
SERVER_NAME = "luma-mcp-server"
