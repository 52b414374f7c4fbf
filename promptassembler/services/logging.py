# promptassembler/services/logging.py
import sys
from typing import Optional
from loguru import logger

from ..config.paths import get_user_log_dir

CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {process} | {name}:{function}:{line} - {message}"

def _add_file_sink() -> Optional[str]:
    """Daily-rotated DEBUG log under the user log dir. Returns the path pattern, or None if unusable."""
    try:
        log_file = str(get_user_log_dir() / "promptassembler_{time:YYYY-MM-DD}.log")
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="1 day",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
        )
        return log_file
    except (OSError, ValueError) as e:
        logger.error(f"Could not configure file logging in the user log dir: {e}")
        logger.warning("File logging disabled.")
        return None

def setup_logging(level="INFO", verbose=False, log_to_file=True):
    """
    Configures Loguru sinks for a CLI run.

    The console sink writes to stderr; stdout carries the generated prompt and
    must stay clean for piping.
    """
    log_level = "DEBUG" if verbose else level
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    log_file = _add_file_sink() if log_to_file else None
    logger.debug(f"Logging initialized. Level: {log_level}. Log file: {log_file or 'none'}")
