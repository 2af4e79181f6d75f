"""Logging setup shared by the API and the discovery core."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single stdout handler to the root logger."""

    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(handler, "_project_assist", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._project_assist = True  # type: ignore[attr-defined]
    root.addHandler(handler)
