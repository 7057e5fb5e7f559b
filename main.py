#!/usr/bin/env python3
"""
Bolide AI MCP Server
====================

Main entry point. Serves marketing workflow tools to an MCP client over
stdio.

Usage:
    python main.py                    # Serve over stdio
    python main.py --diagnose         # Print the diagnostic report and exit
    python main.py --config cfg.yaml  # Load settings from a YAML file

Tool exposure is controlled by BOLIDEAI_MCP_TOOL_<NAME> and
BOLIDEAI_MCP_GROUP_<NAME> environment variables; with none set to "true"
every tool is exposed.
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

import anyio
from rich.console import Console

from core.errors import BolideError
from core.gate import EnablementGate
from infra.config import SERVER_VERSION, ServerConfig
from infra.logging import configure_logging
from infra.server import create_server, run_stdio
from tools.catalog import ToolContext, build_registry
from tools.diagnostic import build_report
from tools.dispatcher import Dispatcher

# stdout carries the protocol
console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bolide AI MCP Server - marketing workflow tools over MCP"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a YAML configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides config)"
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for JSON log files"
    )
    parser.add_argument(
        "--no-file-log",
        action="store_true",
        help="Disable the JSON log file"
    )
    parser.add_argument(
        "--diagnose",
        action="store_true",
        help="Print the diagnostic report and exit"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {SERVER_VERSION}"
    )
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.load(config_path=args.config)
    except BolideError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        return 2

    if args.log_level:
        config.log_level = args.log_level
    if args.log_dir:
        config.log_dir = args.log_dir

    configure_logging(
        level=getattr(logging, config.log_level, logging.INFO),
        log_dir=config.log_dir,
        file=not args.no_file_log,
    )
    logger = logging.getLogger("bolide.main")

    gate = EnablementGate()

    if args.diagnose:
        print(build_report(config, gate))
        return 0

    try:
        ctx = ToolContext.create(config, gate=gate)
        dispatcher = Dispatcher(gate)
        dispatcher.register_all(build_registry(ctx))

        server = create_server(dispatcher)
        logger.info(f"Starting Bolide AI MCP server v{SERVER_VERSION} with {len(dispatcher)} tools")
        anyio.run(run_stdio, server)
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception:
        logger.exception("Fatal error")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
