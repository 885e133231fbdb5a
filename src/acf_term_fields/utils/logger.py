from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler


class LoggingSettings(BaseSettings):
    """Logging configuration, isolated from the rest of the environment.

    Reads ``.env`` and the environment but ignores unrelated keys.

    Attributes:
        log_dir: Log directory.
        console_level: Console handler level.
        file_level: File handler level.
        file_name: Log file name.
        log_to_file: Install the rotating file handler, off by default.
        max_bytes: Size before rotating.
        backup_count: Rotated files kept.
        rich_tracebacks: Rich tracebacks on the console.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_prefix="ACF_TERM_FIELDS_",
    )

    log_dir: Path = Field(default=Path("data/logs"))
    console_level: str = Field(default="WARNING")
    file_level: str = Field(default="DEBUG")
    file_name: str = Field(default="acf_term_fields.log")
    log_to_file: bool = Field(default=False)
    max_bytes: int = Field(default=5_000_000)
    backup_count: int = Field(default=5)
    rich_tracebacks: bool = Field(default=True)


@dataclass(slots=True)
class _Runtime:
    configured: bool = False


_runtime: _Runtime = _Runtime()


def configure_logging(*, settings: Optional[LoggingSettings] = None) -> None:
    """Configure global logging once, Rich console plus rotating file.

    Args:
        settings: Optional override, mostly for tests.
    """
    if _runtime.configured:
        return

    s = settings or LoggingSettings()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console_level = getattr(logging, s.console_level.upper(), logging.WARNING)
    file_level = getattr(logging, s.file_level.upper(), logging.DEBUG)

    console_handler = RichHandler(
        rich_tracebacks=bool(s.rich_tracebacks),
        markup=False,
        show_path=False,
        show_level=True,
        log_time_format="[%X]",
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)

    if s.log_to_file:
        s.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(s.log_dir / s.file_name),
            maxBytes=int(s.max_bytes),
            backupCount=int(s.backup_count),
            encoding="utf_8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        root.addHandler(file_handler)

    for noisy in ("urllib3", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    _runtime.configured = True


def get_logger(name: str = "acf_term_fields", level: str | None = None) -> logging.Logger:
    """Return a logger, configuring global logging first.

    Args:
        name: Logger name.
        level: Optional level override.

    Returns:
        Configured logger.
    """
    configure_logging()
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
