import os

import uvicorn
from pydantic import ValidationError as PydanticValidationError

from contentforge.config import load_config
from contentforge.log_config import configure_logging, logger
from contentforge.server import create_app

CONFIG_PATH_ENV = "CONTENTFORGE_CONFIG"


def main() -> None:
    """Load configuration, failing fast when it is incomplete, then serve."""
    try:
        config = load_config(os.getenv(CONFIG_PATH_ENV))
    except PydanticValidationError as exc:
        configure_logging()
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
