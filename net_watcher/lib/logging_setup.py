import os
import sys
import logging
from loguru import logger

# stdlib loggers used by the HTTP stack behind the telemetry writer
NOISY_LIBRARIES = ("httpx", "httpcore")


class InterceptHandler(logging.Handler):
    """Bridge stdlib logging -> Loguru, preserving level and caller site."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_dir: str = "logs"):
    """
    Configure Loguru with dual-sink logging:
    1. File sink: captures ALL logs at DEBUG level
    2. Console sink: shows only explicit console.info/warning/error calls

    Returns:
        tuple: (debug_logger, console_logger)
            - debug_logger: For internal/debug messages (goes to file only)
            - console_logger: For user-facing messages (goes to both file + console)

    Usage:
        logger, console = setup_logging()
        logger.debug("Probe timed out")                 # File only
        console.info("Endpoint: ..., RTT: 12.345")      # File + Console
    """
    os.makedirs(log_dir, exist_ok=True)

    # Remove default handler
    logger.remove()

    # Intercept stdlib logging (httpx, httpcore)
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.DEBUG, force=True)
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    # 1) FILE SINK: Everything at DEBUG level
    logger.add(
        os.path.join(log_dir, "net_watcher_debug.log"),
        rotation="10 MB",
        retention="7 days",
        level="DEBUG",
        enqueue=True,
        backtrace=True,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
    )

    # 2) CONSOLE SINK: Only messages tagged with console=True
    def console_filter(record):
        """Only allow messages explicitly marked for console output."""
        return record["extra"].get("console", False)

    logger.add(
        sys.stdout,
        level="INFO",
        filter=console_filter,
        colorize=True,
        format="<level>{message}</level>"
    )

    debug_logger = logger
    console_logger = logger.bind(console=True)

    return debug_logger, console_logger
