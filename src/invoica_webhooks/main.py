"""Application entry point for the webhook service."""

from __future__ import annotations

import logging
import os

import uvicorn

from invoica_webhooks.config.settings import AppConfig

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def main() -> None:
    """Start the webhook service."""
    config = AppConfig()
    configure_logging(config.log_level)
    reload = os.getenv("INVOICA_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "invoica_webhooks.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
