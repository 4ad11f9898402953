"""Message envelope, tool-call parsing, shell tool, file-backed state and test helpers for multi-agent systems."""

__version__ = "0.1.0"

__all__ = ["assertions", "builders", "mcp_parser", "proto", "store", "tools"]