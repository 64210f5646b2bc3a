"""Worker entry point.

Usage:
    cva-enduro-worker --config ./cva-enduro.toml --port 8080
"""

from __future__ import annotations

import argparse
import sys

import structlog
import uvicorn

from cva_enduro.api.app import create_app
from cva_enduro.core.config import load_settings, resolve_config_file
from cva_enduro.core.exceptions import ConfigError
from cva_enduro.core.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the CVA Enduro post-storage worker")
    parser.add_argument("--config", default=None, help="Configuration file (default: search cva-enduro.toml)")
    parser.add_argument("--host", default="0.0.0.0", help="Listen address")
    parser.add_argument("--port", type=int, default=8080, help="Listen port")
    args = parser.parse_args(argv)

    try:
        config_file = resolve_config_file(args.config)
        settings = load_settings(config_file)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    configure_logging(debug=settings.debug, verbosity=settings.verbosity)
    logger = structlog.get_logger(__name__)
    logger.info(
        "worker_starting",
        config_file=str(config_file) if config_file else None,
        task_queue=settings.temporal.task_queue,
        max_concurrent_sessions=settings.worker.max_concurrent_sessions,
    )

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
