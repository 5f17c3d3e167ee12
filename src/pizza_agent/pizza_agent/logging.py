"""Loguru setup for the CLI.

setup_logging() is called once at startup; every other module does
`from loguru import logger`. Records carry the session id in `extra`, so
the file log of a long-running process can be split per conversation.
Card numbers and security codes are never passed to the logger.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path(__file__).resolve().parents[3] / "logs"

STDERR_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[session_id]} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(
    level: str = "DEBUG", log_dir: Path | None = None, session_id: str = "-"
) -> None:
    """Replace loguru's default handler with a stderr sink and a rotating file.

    Args:
        level: Minimum log level for both sinks.
        log_dir: Where pizza_agent.log goes (default: <project root>/logs).
        session_id: Tag written on every file record.
    """
    logger.remove()
    logger.configure(extra={"session_id": session_id})

    logger.add(sys.stderr, level=level, format=STDERR_FORMAT)

    target = log_dir or LOG_DIR
    target.mkdir(parents=True, exist_ok=True)
    logger.add(
        target / "pizza_agent.log",
        level=level,
        rotation="3 hours",
        retention="1 day",
        format=FILE_FORMAT,
    )
