"""HTTP API process entrypoint."""

from __future__ import annotations

import logging

import uvicorn

from src.api.server import create_api
from src.app import create_app
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Serve the API with uvicorn until interrupted."""

    settings = load_settings()
    configure_logging(settings.log_level, quiet=settings.log_quiet_loggers)

    api = create_api(create_app(settings))
    logger.info(
        "starting host=%s port=%d recipient_check=%s prompt_version=%s",
        settings.host,
        settings.port,
        settings.agent_recipient_check,
        settings.prompt_version,
    )
    # log_config=None keeps the formatting set up by configure_logging().
    uvicorn.run(api, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
