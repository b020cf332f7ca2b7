#!/usr/bin/env python3
"""github-projects-mcp MCP Server entry point.

Run:
  python -m github_projects_mcp                # start server (stdio)
  python -m github_projects_mcp --test         # run lightweight self-tests then exit
"""

import argparse
import asyncio
import sys

from github_projects_mcp.errors import SafeError
from github_projects_mcp.server import run_server, test_server


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="github_projects_mcp", add_help=True)
    parser.add_argument(
        "--test",
        action="store_true",
        help="Build tool, prompt and resource definitions then exit.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI dispatcher for the MCP server."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        if args.test:
            asyncio.run(test_server())
        else:
            asyncio.run(run_server())
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except SafeError as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
