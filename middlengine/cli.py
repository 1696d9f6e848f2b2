"""CLI argument parsing and main entry point.

Provides two subcommands:

* ``middlengine serve``   — build the engine from a config file and serve it with Uvicorn.
* ``middlengine inspect`` — build and compose the engine, then print the chain.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, NoReturn, Optional

import uvicorn

from middlengine.constants import (
    CONFIG_ENV_VAR,
    CONFIG_SEARCH_ORDER,
    DEFAULT_HOST,
    DEFAULT_PORT,
    PROJECT_NAME,
    PROJECT_VERSION,
)
from middlengine.display.logging_config import VALID_LEVELS, setup_logging
from middlengine.errors import ConfigurationError

module_logger = logging.getLogger(__name__)


def _find_config_file() -> str:
    """Locate the config file in the working directory.

    Search order: middlengine.yaml → middlengine.yml.  Falls back to
    ``CWD/middlengine.yaml`` if nothing exists (loader will error).
    """
    for name in CONFIG_SEARCH_ORDER:
        candidate = os.path.join(os.getcwd(), name)
        if os.path.isfile(candidate):
            return candidate
    return os.path.join(os.getcwd(), CONFIG_SEARCH_ORDER[0])


def resolve_config_path(config_path: Optional[str]) -> str:
    """Resolve the config path: CLI flag → env var → auto-detect."""
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
    if config_path is None:
        config_path = _find_config_file()
    return os.path.abspath(config_path)


def _add_app_dir(app_dir: str) -> str:
    """Put *app_dir* at the front of ``sys.path`` so config refs can import from it."""
    abs_dir = os.path.abspath(app_dir)
    if abs_dir not in sys.path:
        sys.path.insert(0, abs_dir)
        module_logger.debug("Added %s to sys.path.", abs_dir)
    return abs_dir


def _fail(message: str) -> NoReturn:
    print(f"\n❌ Error: {message}\n", file=sys.stderr)
    sys.exit(1)


# ── ``middlengine serve`` ───────────────────────────────────────────────


async def _run_server(
    config_path: str,
    host: Optional[str],
    port: Optional[int],
    log_lvl_cli: str,
) -> None:
    """Async main for the ``serve`` subcommand."""
    from middlengine.config import build_engine, load_engine_config
    from middlengine.server import create_app

    _, cfg_log_lvl = setup_logging(log_lvl_cli)
    module_logger.info(
        "---- %s v%s starting (file log level: %s) ----",
        PROJECT_NAME,
        PROJECT_VERSION,
        cfg_log_lvl,
    )
    module_logger.info("Configuration file path resolved to: %s", config_path)

    config = load_engine_config(config_path)
    engine = build_engine(config)
    # Freeze before the server accepts connections.
    engine.compose()

    bind_host = host if host is not None else config.server.host
    bind_port = port if port is not None else config.server.port
    uvicorn_cfg = uvicorn.Config(
        app=create_app(engine),
        host=bind_host,
        port=bind_port,
        log_config=None,
        log_level=cfg_log_lvl.lower() if cfg_log_lvl == "DEBUG" else "warning",
    )
    server = uvicorn.Server(uvicorn_cfg)

    module_logger.info("Preparing to start Uvicorn server: http://%s:%s", bind_host, bind_port)
    print(f"{PROJECT_NAME} serving on http://{bind_host}:{bind_port}")
    try:
        await server.serve()
    except (KeyboardInterrupt, SystemExit) as e_exit:
        module_logger.info("Server stopped due to '%s'.", type(e_exit).__name__)
    finally:
        module_logger.info("%s has shut down or is shutting down.", PROJECT_NAME)


def _cmd_serve(args: argparse.Namespace) -> None:
    """Entry-point for ``middlengine serve``."""
    config_path = resolve_config_path(args.config)
    _add_app_dir(args.app_dir)
    try:
        asyncio.run(
            _run_server(
                config_path=config_path,
                host=args.host,
                port=args.port,
                log_lvl_cli=args.log_level,
            )
        )
    except ConfigurationError as exc:
        module_logger.error("Configuration error: %s", exc)
        _fail(str(exc))
    except KeyboardInterrupt:
        module_logger.info("Interrupted by KeyboardInterrupt.")


# ── ``middlengine inspect`` ─────────────────────────────────────────────


def _cmd_inspect(args: argparse.Namespace) -> None:
    """Entry-point for ``middlengine inspect``."""
    from middlengine.config import load_engine
    from middlengine.display.console import print_chain

    _add_app_dir(args.app_dir)
    config_path = resolve_config_path(args.config)
    try:
        engine = load_engine(config_path)
        engine.compose()
    except ConfigurationError as exc:
        _fail(str(exc))
    print_chain(engine, title=os.path.basename(config_path))


# ── CLI parser construction ──────────────────────────────────────────────


def _add_config_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help=(
            "Path to configuration file (YAML). "
            f"Default: ${CONFIG_ENV_VAR} or auto-detect {'/'.join(CONFIG_SEARCH_ORDER)}"
        ),
    )
    parser.add_argument(
        "--app-dir",
        type=str,
        default=".",
        metavar="DIR",
        help="Directory prepended to sys.path before resolving config refs (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with serve/inspect subcommands."""
    parser = argparse.ArgumentParser(
        prog=PROJECT_NAME,
        description=f"{PROJECT_NAME} v{PROJECT_VERSION}",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {PROJECT_VERSION}")

    subparsers = parser.add_subparsers(dest="command")

    # ── serve ───────────────────────────────────────────────────
    sp_serve = subparsers.add_parser(
        "serve",
        help="Serve the configured middleware chain over HTTP (Uvicorn)",
    )
    _add_config_arg(sp_serve)
    sp_serve.add_argument(
        "--host",
        type=str,
        default=None,
        help=f"Host address (default: server.host from config, else {DEFAULT_HOST})",
    )
    sp_serve.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port (default: server.port from config, else {DEFAULT_PORT})",
    )
    sp_serve.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=[lvl.lower() for lvl in VALID_LEVELS],
        help="Set file logging level (default: info)",
    )
    sp_serve.set_defaults(func=_cmd_serve)

    # ── inspect ─────────────────────────────────────────────────
    sp_inspect = subparsers.add_parser(
        "inspect",
        help="Print the composed middleware chain, outermost layer first",
    )
    _add_config_arg(sp_inspect)
    sp_inspect.set_defaults(func=_cmd_inspect)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    else:
        args.func(args)
