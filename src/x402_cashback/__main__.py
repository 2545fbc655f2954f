"""Run the facilitator as a standalone HTTP server."""

import sys

from x402_cashback.config import Config, validate_config
from x402_cashback.errors import ConfigurationError
from x402_cashback.logging_utils import get_logger, setup_logging

logger = get_logger("x402_cashback")


def main() -> None:
    config = Config()
    setup_logging(config.log_level, config.log_format)

    try:
        validate_config(config)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    if config.is_production:
        # Production hosts import x402_cashback.server:app themselves.
        logger.info("Production environment: serve x402_cashback.server:app from the ASGI host")
        return

    import uvicorn

    logger.info(f"Server listening at http://{config.host}:{config.port}")
    uvicorn.run(
        "x402_cashback.server:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
