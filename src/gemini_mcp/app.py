"""gemini-mcp application entry point.

Command-line parsing, logging setup and the stdio server lifecycle.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from mcp.server.stdio import stdio_server

from . import __version__
from .config import Config, get_config
from .server import create_server

__all__ = ["build_parser", "configure_logging", "run_server", "main"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

HELP_EPILOG = """\
ENVIRONMENT VARIABLES:
  GEMINI_BIN                   Override the gemini binary path (default: 'gemini')
  GEMINI_DEFAULT_TIMEOUT       Default timeout in seconds (1-3600, default: 600)
  GEMINI_FORCE_MODEL           Default model when request omits 'model' parameter
  GEMINI_MCP_DEBUG             Enable debug logging (true/1/yes/on)
  GEMINI_MCP_LOG_FILE          Write logs to this file instead of stderr

USAGE:
  This server communicates via stdio using the Model Context Protocol (MCP).
  It should be configured in your MCP client settings, e.g.:
    {
      "mcpServers": {
        "gemini": {
          "command": "gemini-mcp"
        }
      }
    }

SUPPORTED PARAMETERS:
  The 'gemini' tool accepts the following parameters:

  PROMPT (required)            Task instruction to send to Gemini
  sandbox                      Run in sandbox mode (default: false)
  SESSION_ID                   Resume an existing session (from previous response)
  return_all_messages          Return all messages including reasoning (default: false)
  model                        Model to use (default: GEMINI_FORCE_MODEL or Gemini CLI default)
  timeout_secs                 Timeout in seconds (1-3600, default: GEMINI_DEFAULT_TIMEOUT or 600)

GEMINI.md SUPPORT:
  If a GEMINI.md file exists in the working directory, its content is
  prepended to the prompt as a system prompt. Maximum file size: 100KB

RETURN STRUCTURE:
  - success: boolean indicating execution status
  - SESSION_ID: unique identifier for resuming conversations
  - agent_messages: concatenated assistant response text
  - all_messages: (optional) complete JSON events when return_all_messages=true
  - error: error description when success=false
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-mcp",
        description="MCP server that provides AI-driven tasks through the Gemini CLI",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def configure_logging(config: Config) -> None:
    """Route logs to stderr or a file; stdout carries the MCP channel."""
    handler: logging.Handler
    if config.log_file:
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Third-party loggers stay at WARNING
    logging.basicConfig(level=logging.WARNING, handlers=[handler])
    logging.getLogger("gemini_mcp").setLevel(
        logging.DEBUG if config.debug else logging.INFO
    )


async def run_server(config: Config | None = None) -> None:
    """Serve MCP over stdio until the client disconnects."""
    config = config or get_config()
    logger.info(f"Starting gemini-mcp {__version__}: {config}")

    server = create_server(config)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )

    logger.info("gemini-mcp stopped")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    build_parser().parse_args(argv)

    config = get_config()
    configure_logging(config)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    main()
