"""GitHub MCP Server.

Exposes GitHub issues, pull requests, repositories, search, security alerts and
user identity as MCP tools, plus repository content as MCP resource templates.

Run with: python -m github_mcp_server
"""

__version__ = "0.4.0"
