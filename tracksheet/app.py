"""
Application entry point.
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .utils.config import load_config
from .utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tracksheet",
                                     description="Annotate a PDF time tracker template.")
    parser.add_argument("file", nargs="?", help="document to attach on startup")
    parser.add_argument("--config", help="path to a config.json file")
    parser.add_argument("--log-level", help="override the configured log level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main function to run the editor.
    It checks for a file path passed as a command-line argument.
    """
    args = parse_args(argv)

    config = load_config(Path(args.config) if args.config else None)
    configure_logging(args.log_level or config.log_level)
    logger.info("Starting TrackSheet %s", __version__)

    # Qt is imported late so --help and --version work without a display
    from PyQt5.QtWidgets import QApplication
    from .ui import MainWindow

    app = QApplication(sys.argv[:1])
    window = MainWindow(config, args.file)
    window.showMaximized()
    sys.exit(app.exec_())
