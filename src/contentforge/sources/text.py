from contentforge.errors import ExtractionError
from contentforge.log_config import logger


def ensure_source_length(text: str, minimum: int, purpose: str) -> str:
    """Return ``text`` unchanged when it has at least ``minimum`` characters."""
    if len(text) < minimum:
        logger.warning("Source too short for %s length=%d minimum=%d", purpose, len(text), minimum)
        raise ExtractionError(
            f"Content is too short for {purpose} ({len(text)} characters, at least {minimum} required)",
            details={"length": len(text), "minimum": minimum},
        )
    return text
