"""MCP wire protocol and tool definitions."""
