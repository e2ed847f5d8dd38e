"""Command-line entry point: python -m stenella."""

from __future__ import annotations

import argparse

import uvicorn

from stenella.config import load_settings
from stenella.logging_utils import log_event, setup_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="stenella", description="Combined RSS viewer")
    parser.add_argument("--host", help="bind host (default: STENELLA_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="bind port (default: STENELLA_PORT or 8080)")
    parser.add_argument("--log-level", help="logging level (default: STENELLA_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    settings = load_settings()
    log_level = args.log_level or settings.log_level
    setup_logging(log_level)

    host = args.host or settings.host
    port = args.port or settings.port
    log_event("server_starting", url=f"http://{host}:{port}", sources=len(settings.default_sources))

    # uvicorn exits non-zero if the port cannot be bound
    uvicorn.run(
        "stenella.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
