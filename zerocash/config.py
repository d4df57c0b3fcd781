"""
Runtime settings for the zerocash address library.

Values come from the environment so deployments can adjust them without
code changes:

    ZEROCASH_LOG_LEVEL   logging level for configure_logging() (default WARNING)
    ZEROCASH_KEY_FORMAT  serialization written for new keys: der | pem (default der)
"""

import logging
import os
from typing import Optional

LOG_LEVEL = os.getenv("ZEROCASH_LOG_LEVEL", "WARNING").upper()

KEY_FORMAT = os.getenv("ZEROCASH_KEY_FORMAT", "der").lower()
if KEY_FORMAT not in ("der", "pem"):
    raise ValueError(f"ZEROCASH_KEY_FORMAT must be 'der' or 'pem', got {KEY_FORMAT!r}")


def configure_logging(level: Optional[str] = None):
    """Attach a basic stderr handler. Only called by command-line entry points."""
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
