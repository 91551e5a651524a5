"""Entry point for ``python -m taiosd``.

Runs the daemon in the foreground as a single uvicorn process serving the app
built from the loaded configuration.
"""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from .config.loader import load_config
from .config.models import Config
from .main import create_app

logger = logging.getLogger(__name__)


def run(config: Config) -> None:
    """Serve the daemon until interrupted.

    Args:
        config: Effective daemon configuration
    """
    logger.info(f"Serving taiosd on {config.daemon.host}:{config.daemon.port}")
    uvicorn.run(
        create_app(config),
        host=config.daemon.host,
        port=config.daemon.port,
        log_level=config.daemon.log_level.lower(),
    )


def main() -> None:
    """Load configuration and run the daemon.

    Exits with status 1 when the configuration is invalid.
    """
    try:
        config = load_config()
    except ValidationError as e:
        logger.error(f"Invalid taiosd configuration: {e}")
        sys.exit(1)

    run(config)


if __name__ == "__main__":
    main()
