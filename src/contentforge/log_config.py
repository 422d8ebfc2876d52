import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("contentforge")


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the service logger once and set its level."""
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def preview(text: str, limit: int = 100) -> str:
    """Shorten long prompt or model text for debug logs."""
    return text if len(text) <= limit else f"{text[:limit]}..."
