"""CLI entry point for the querysvc server.

The app factory runs inside the uvicorn worker, so the config file path and
command-line overrides are handed over as ``QUERYSVC_*`` environment
variables rather than as a ``Settings`` object.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

MOCK_SOURCE_VARS = (
    "QUERYSVC_SEARCH__SOURCE",
    "QUERYSVC_ACCESS_CONTROL__SOURCE",
    "QUERYSVC_ORGANIZATIONS__SOURCE",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="querysvc",
        description="querysvc — Authorized resource and organization query service",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Listen port (overrides config)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Worker process count")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (single worker)")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--mock-backends",
        action="store_true",
        help="Serve from the in-memory resource, access and organization backends",
    )
    parser.add_argument(
        "--principal",
        type=str,
        default=None,
        help="Skip JWT validation and run every request as this principal (local development only)",
    )
    parser.add_argument("--version", action="version", version=f"querysvc {_get_version()}")
    return parser


def _export_overrides(args: argparse.Namespace) -> None:
    overrides = {
        "QUERYSVC_SERVER__HOST": args.host,
        "QUERYSVC_SERVER__PORT": args.port,
        "QUERYSVC_SERVER__WORKERS": args.workers,
        "QUERYSVC_OBSERVABILITY__LOG_LEVEL": args.log_level,
        "QUERYSVC_AUTH__MOCK_LOCAL_PRINCIPAL": args.principal,
    }
    if args.mock_backends:
        overrides.update(dict.fromkeys(MOCK_SOURCE_VARS, "mock"))
    for name, value in overrides.items():
        if value:
            os.environ[name] = str(value)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and start uvicorn."""
    args = build_parser().parse_args(argv)

    from querysvc.api.app import CONFIG_ENV_VAR
    from querysvc.config.settings import Settings
    from querysvc.observability.logging import setup_logging

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        os.environ[CONFIG_ENV_VAR] = str(config_path.resolve())
    _export_overrides(args)

    config_file = os.environ.get(CONFIG_ENV_VAR)
    settings = Settings.from_yaml(config_file) if config_file else Settings()
    setup_logging(settings.observability)

    import uvicorn

    uvicorn.run(
        "querysvc.api.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=1 if args.reload else settings.server.workers,
        reload=args.reload,
        log_level=settings.observability.log_level,
    )


def _get_version() -> str:
    from querysvc import __version__

    return __version__


if __name__ == "__main__":
    main()
