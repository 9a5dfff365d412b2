"""Run the transcripts API with uvicorn."""

from __future__ import annotations

import argparse
import os

import uvicorn
from loguru import logger

from core.logging_config import setup_logging_from_env
from core.settings import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the transcripts API")
    parser.add_argument("--config", help="Path to YAML configuration (default: TRANSCRIPTS_CONFIG or config/default.yaml)")
    parser.add_argument("--host", help="Bind address (default: server.host)")
    parser.add_argument("--port", type=int, help="Listening port (default: server.port / PORT)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    setup_logging_from_env()
    # Fails fast on a missing or invalid configuration.
    settings = get_settings(args.config)
    settings.require_auth_token()
    if args.config:
        os.environ["TRANSCRIPTS_CONFIG"] = args.config

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info("Server starting on {host}:{port}", host=host, port=port)
    uvicorn.run(
        "services.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
