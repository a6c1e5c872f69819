"""Logging setup using Loguru."""

from __future__ import annotations
import sys
from typing import Optional

from loguru import logger

from .config import settings

DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

PROD_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(level: Optional[str] = None, colorize: Optional[bool] = None) -> None:
    """Replace loguru's default sink with one stderr sink.

    Lambda handlers and the FastAPI app call this once at import; the weaver
    leaves it to the embedding application.

    Args:
        level: Log level, defaults to ``LOG_LEVEL``.
        colorize: Colored output, defaults to on outside production stages.
    """
    logger.remove()
    dev = settings.is_development
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format=DEV_FORMAT if dev else PROD_FORMAT,
        colorize=colorize if colorize is not None else dev,
        diagnose=dev,
        catch=True,
    )
