import sys
import logging
from typing import Any

from loguru import logger

from bb_scrape.config.settings import settings

# Chunk previews in parser debug lines can carry whole table rows
MAX_MESSAGE_CHARS = 2000


def truncate_long_messages(record: dict[str, Any]) -> bool:
    """Filter function that shortens oversized log messages (raw HTML previews)."""
    message = record["message"]
    if len(message) > MAX_MESSAGE_CHARS:
        record["message"] = message[:MAX_MESSAGE_CHARS] + " …[truncated]"
    return True  # Keep the record after trimming


def setup_logging(log_file: bool = True) -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    # Basic console logging
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=True,
        filter=truncate_long_messages,
    )

    # Parser traces go to the file only
    if log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
            enqueue=True,
            filter=truncate_long_messages,
        )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    # Intercept standard logging messages (httpx logs through it)
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding Loguru level if it exists
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
