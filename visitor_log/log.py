"""
Logging setup for the Visitor Log window.

The window has no console of its own when started from a desktop launcher,
so besides stderr the records can also go to a file in the application
directory, next to the saved visitor snapshot.
"""

import logging
import os

from visitor_log import config


def configure_logging(level=None, log_file=None):
    """Configure the root logger once at startup.

    ``level`` wins over the ``LOG_LEVEL`` environment variable, which wins
    over ``config.DEFAULT_LOG_LEVEL``. With ``log_file`` set, records are
    appended to that file as well; its directory is created if needed.
    """
    resolved_level = (level or os.getenv("LOG_LEVEL") or config.DEFAULT_LOG_LEVEL).upper()

    handlers = [logging.StreamHandler()]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=resolved_level, format=config.LOG_FORMAT, handlers=handlers)
