"""
portfolio_sim/log_setup.py
--------------------------
Root logger setup for applications embedding the engine.

Engine modules only ever call ``logging.getLogger(__name__)``.  The host
application calls :func:`configure_logging` once at start-up; library code
never does.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : str or int
        Level name (``"DEBUG"``, ``"info"`` …) or a ``logging`` constant.
        Unknown names fall back to INFO.
    log_file : str or Path, optional
        Also write to this file; missing parent directories are created.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # numexpr announces its thread count at INFO when pandas imports it.
    logging.getLogger("numexpr").setLevel(logging.WARNING)
