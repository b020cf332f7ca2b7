"""github-projects-mcp: GitHub repositories, issues and Projects (v2) as MCP tools."""

__version__ = "0.1.0"
