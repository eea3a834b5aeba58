"""
Logging setup for the API process.

Modules log through ``logging.getLogger(__name__)``; this only wires the root
logger to stdout once at startup.
"""

import sys
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear handlers left by a previous call or by the server
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
