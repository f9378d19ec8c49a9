"""
Command-line entry point.

    ui-feedback-mcp [server] [--port N] [--mcp-only]   start MCP (+ HTTP)
    ui-feedback-mcp init                               register with agents
    ui-feedback-mcp doctor                             check setup

The MCP server always runs on stdio; the HTTP API runs alongside it on
the same event loop and store unless --mcp-only is given.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from ui_feedback.config import settings
from ui_feedback.core.structured_logging import setup_logging
from ui_feedback.services.agent_setup import run_doctor, run_init

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ui-feedback-mcp",
        description="Collect UI feedback from a browser widget and serve it to coding agents over MCP.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="server",
        choices=["server", "init", "doctor"],
        help="server (default), init, or doctor",
    )
    parser.add_argument("--port", type=int, default=None, help=f"HTTP port (default {settings.http_port})")
    parser.add_argument("--mcp-only", action="store_true", help="Do not start the HTTP API")
    return parser


async def serve(port: int, mcp_only: bool = False) -> None:
    """Run the MCP stdio server and, unless ``mcp_only``, the HTTP API."""
    from ui_feedback.main import create_app
    from ui_feedback.mcp_server import mcp_server

    tasks = [mcp_server.run_stdio_async()]
    if not mcp_only:
        config = uvicorn.Config(
            create_app(),
            host=settings.http_host,
            port=port,
            log_config=None,  # keep our structlog handlers
            access_log=False,
        )
        tasks.append(uvicorn.Server(config).serve())
        logger.info("HTTP API listening on http://%s:%s", settings.http_host, port)

    logger.info("MCP server connected via stdio")
    await asyncio.gather(*tasks)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        log_dir=settings.log_dir,
    )

    if args.command == "init":
        run_init()
        return 0
    if args.command == "doctor":
        return 1 if run_doctor() else 0

    port = args.port if args.port is not None else settings.http_port
    if not 1 <= port <= 65535:
        print(f"Invalid port: {port}. Must be 1-65535.", file=sys.stderr)
        return 1

    try:
        asyncio.run(serve(port, mcp_only=args.mcp_only))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
