"""
Logging Setup

Console lines carry a UTC timestamp, level, logger name and, when a log
call passes extra={"session_id": ...}, the circuit session it concerns.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Client libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "langchain_google_genai", "google")

LEVEL_COLOURS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class StructuredFormatter(logging.Formatter):
    """One line per record; colour only when writing to a terminal."""

    def __init__(self, colour: bool = False):
        super().__init__()
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        line = f"[{timestamp}] {record.levelname:8} [{record.name}]"

        session_id = getattr(record, "session_id", None)
        if session_id:
            line += f" [session {session_id}]"
        line += f" {record.getMessage()}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        if self.colour and record.levelname in LEVEL_COLOURS:
            return f"{LEVEL_COLOURS[record.levelname]}{line}{RESET}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger for the API process.

    Args:
        level: Logging level name; unknown names fall back to INFO.
        log_file: Optional path; the file gets the same lines, uncoloured.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(colour=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
