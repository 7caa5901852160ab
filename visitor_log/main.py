"""
Launches the PyQt GUI and initializes the visitor store.
"""

import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from visitor_log import config
from visitor_log.database import Database
from visitor_log.errors import PersistenceFailure
from visitor_log.gui import VisitorLogWindow
from visitor_log.log import configure_logging
from visitor_log.session import Session
from visitor_log.snapshots import MemorySnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Front-desk visitor log")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep visitors in memory only; nothing is saved between runs",
    )
    parser.add_argument("--log-level", help="Overrides the LOG_LEVEL environment variable")
    return parser


def build_session(memory: bool = False) -> Session:
    """Open the visitor store. Raises PersistenceFailure if the saved one is unreadable."""
    snapshots = MemorySnapshotStore() if memory else SnapshotStore(config.APP_DIR)
    return Session(Database(snapshots))


def main():
    args, qt_args = build_parser().parse_known_args()
    configure_logging(args.log_level, log_file=None if args.memory else config.LOG_FILE)

    app = QApplication([sys.argv[0], *qt_args])
    try:
        session = build_session(args.memory)
    except PersistenceFailure as e:
        logger.exception("Could not open the visitor store in %s", config.APP_DIR)
        QMessageBox.critical(None, "Visitor Log", f"Could not open the saved visitors.\n\n{e}")
        sys.exit(1)

    window = VisitorLogWindow(session)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
