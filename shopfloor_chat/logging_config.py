import logging

from shopfloor_chat.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood the console at INFO.
_NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncio",
)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger for the service."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    configured_level = getattr(logging, level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
