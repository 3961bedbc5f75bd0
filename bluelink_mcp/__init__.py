"""bluelink-mcp: voice command dispatcher for Bluelink vehicles."""

__version__ = "1.7.0"
