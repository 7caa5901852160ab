"""
Configuration for Visitor Log.

Everything here can be overridden through environment variables so tests and
alternative installs do not touch the user's real application directory.
"""

import os
import sys


def _default_app_dir():
    if sys.platform == "darwin":
        return os.path.expanduser("~/Library/Application Support/VisitorLog")
    return os.path.expanduser("~/.visitor_log")


APP_DIR = os.environ.get("VISITOR_LOG_HOME") or _default_app_dir()

# key under which the whole store is saved in the snapshot directory
SNAPSHOT_KEY = "visitors"

# scanned ID pictures live next to the opened CSV, in this folder
IMAGE_FOLDER = "photos"

LOG_FILE = os.path.join(APP_DIR, "visitor_log.log")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "INFO"


def unban_password() -> str:
    """Password required to lift a ban. Empty unless configured."""
    return os.environ.get("VISITOR_LOG_UNBAN_PASSWORD", "")
