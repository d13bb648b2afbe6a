"""Start the gateway under uvicorn (``gemini-gateway`` console script)."""
from __future__ import annotations
import logging
import sys

import uvicorn

from gemini_gateway.common.config import ConfigError, load_config
from gemini_gateway.common.logging_setup import setup_logging
from gemini_gateway.serve.app import create_app

LOGGER = logging.getLogger("gemini_gateway.server")


def main() -> None:
    setup_logging()
    try:
        config = load_config()
    except ConfigError as e:
        LOGGER.error("Refusing to start: %s", e)
        sys.exit(1)

    setup_logging(config.log_level)
    app = create_app(config)
    LOGGER.info("Server running at http://%s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())

if __name__ == "__main__":
    main()
