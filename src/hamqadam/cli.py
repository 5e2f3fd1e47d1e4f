"""
Hamqadam CLI entrypoint.

`hamqadam serve` starts the JSON API for a local map front end. It is the same app
`uvicorn hamqadam.api.app:app` loads.
"""

from __future__ import annotations

import argparse
from typing import Any

import uvicorn

from hamqadam.config.settings import get_settings
from hamqadam.core.logging import configure_logging


def _cmd_serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    log_level = (args.log_level or settings.app.log_level).lower()
    uvicorn.run(
        "hamqadam.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hamqadam", description="Walking-route picker API.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.add_argument("--log-level", dest="log_level", default=None, help="Overrides app.log_level")
    serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m hamqadam.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
