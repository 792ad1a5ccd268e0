#!/usr/bin/env python3
"""github-mcp-server entry point.

Run:
  python -m github_mcp_server                              # start server (stdio)
  python -m github_mcp_server --read-only --toolsets repos,issues
  python -m github_mcp_server --test                       # run lightweight self-tests then exit
"""

import argparse
import asyncio
import sys

from github_mcp_server.config import load_config_from_env
from github_mcp_server.errors import SafeError
from github_mcp_server.server import run_server, test_server


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="github-mcp-server", add_help=True)
    parser.add_argument(
        "--read-only",
        action="store_true",
        default=None,
        help="Restrict the server to read-only operations.",
    )
    parser.add_argument(
        "--toolsets",
        default=None,
        help="Comma-separated toolsets to enable (default: all).",
    )
    parser.add_argument(
        "--gh-host",
        default=None,
        help="GitHub hostname for GitHub Enterprise Server or ghe.com, including the scheme.",
    )
    parser.add_argument("--log-file", default=None, help="Write logs to this file at debug level.")
    parser.add_argument(
        "--enable-command-logging",
        action="store_true",
        default=None,
        help="Emit one JSON command log line per tool call and resource read.",
    )
    parser.add_argument(
        "--export-translations",
        action="store_true",
        default=None,
        help="Write every translation key to github-mcp-server.json on startup.",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Run built-in server self tests (tool & resource template listing) then exit.",
    )
    return parser.parse_args(argv)


def main() -> None:
    """CLI dispatcher for the MCP server."""
    args = parse_args(sys.argv[1:])
    try:
        if args.test:
            asyncio.run(test_server())
            return
        config = load_config_from_env(
            read_only=args.read_only,
            toolsets=args.toolsets.split(",") if args.toolsets is not None else None,
            host=args.gh_host,
            log_file=args.log_file,
            enable_command_logging=args.enable_command_logging,
            export_translations=args.export_translations,
        )
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except SafeError as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        print(f"Server error: {exc}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
