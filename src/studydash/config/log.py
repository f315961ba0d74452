"""Logging setup. Everything goes to stderr so stdout stays free for protocol lines."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def _parse_level(level: str) -> int:
    return logging.getLevelNamesMapping().get((level or "INFO").upper(), logging.INFO)


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure the ``studydash`` logger hierarchy.

    Idempotent: safe to call multiple times. When ``log_dir`` is given a
    rotating file handler is added next to the stderr handler.
    """
    logger = logging.getLogger("studydash")
    if getattr(logger, "_configured", False):
        return logger

    numeric_level = _parse_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    formatter = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / "studydash.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        fh.setLevel(numeric_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    logger._configured = True  # type: ignore[attr-defined]
    return logger
