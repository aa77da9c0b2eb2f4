"""
Logging setup.

Modules log through `logging.getLogger(__name__)`; entry points call
configure_logging() once with the configured level.
"""

from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    if level is None:
        from darkpool.core.settings import get_settings

        level = get_settings().runtime.log_level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
