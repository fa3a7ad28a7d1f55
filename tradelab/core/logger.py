"""
Logging for the tradelab namespace: console, optional file, per-area levels.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP clients under the data sources log every request at DEBUG
_NOISY_LIBRARIES = ("urllib3", "binance")


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
    area_levels: Optional[Mapping[str, str]] = None,
) -> logging.Logger:
    """
    Configure the "tradelab" logger and return it. Calling again replaces the handlers.

    area_levels maps a sub-logger to its own level, e.g. {"live": "DEBUG"}
    raises only tradelab.live. Never log API keys or secrets.
    """
    root = logging.getLogger("tradelab")
    root.setLevel(_level(level))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path / log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    for area, area_level in (area_levels or {}).items():
        name = area if area.startswith("tradelab") else f"tradelab.{area}"
        logging.getLogger(name).setLevel(_level(area_level))

    for lib in _NOISY_LIBRARIES:
        logging.getLogger(lib).setLevel(max(logging.WARNING, root.level))

    return root
