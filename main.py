"""
md-to-docs service entry point.

Configures logging from the environment and serves the HTTP app with uvicorn.
"""

import logging

import uvicorn

from core.config import get_config
from core.server import app

LOG_FORMAT = "[%(levelname)s] %(asctime)s %(name)s %(message)s"

logger = logging.getLogger(__name__)


def main() -> None:
    config = get_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    logger.info(f"Starting md-to-docs: {config.get_config_summary()}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
