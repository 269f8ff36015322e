from __future__ import annotations

import enum
import json
import logging
import sys
from typing import Optional

import pydantic as pd
from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# -v count -> level, anything above the last entry is TRACE as well
VERBOSITY_LEVELS: dict[int, int] = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
    4: TRACE,
}

logger = logging.getLogger("kimspect")


class LogFormat(str, enum.Enum):
    text = "text"
    json = "json"


class LoggingConfig(pd.BaseModel):
    model_config = pd.ConfigDict(frozen=True)

    level: int = logging.ERROR
    format: LogFormat = LogFormat.text


def verbosity_to_level(verbosity: int) -> int:
    if verbosity < 0:
        raise ValueError(f"Verbosity can not be negative, got {verbosity}")

    return VERBOSITY_LEVELS[min(verbosity, max(VERBOSITY_LEVELS))]


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload)


def init_logging(config: LoggingConfig, *, console: Optional[Console] = None) -> None:
    """
    Install the log handler for the whole process. Logs always go to stderr,
    so that stdout only carries the rendered output.
    """

    handler: logging.Handler
    if config.format == LogFormat.json:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(console=console or Console(stderr=True), show_path=False)

    logging.basicConfig(
        level="NOTSET",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("").setLevel(logging.CRITICAL)
    logger.setLevel(config.level)
