from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR = "DUNGEONCRAWL_LOG_LEVEL"


def configure_logging(default_level: int = logging.WARNING) -> None:
    """Configure the root logger for the command line tools.

    Respects DUNGEONCRAWL_LOG_LEVEL if set.
    """
    level_name = os.getenv(LOG_LEVEL_ENV_VAR)
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )
