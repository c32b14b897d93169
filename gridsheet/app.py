import faulthandler
import logging
import signal
import sys
import traceback

from PyQt6 import QtCore, QtWidgets

from gridsheet.config import load_config, open_settings
from gridsheet.logging_config import setup_logging_from_config
from gridsheet.windows.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> None:
    settings = open_settings()
    setup_logging_from_config(load_config(settings))

    def _log_unhandled(exc_type, exc_value, exc_traceback) -> None:
        logger.error("Unhandled exception: %s", exc_value)
        traceback.print_exception(exc_type, exc_value, exc_traceback)

    sys.excepthook = _log_unhandled
    faulthandler.enable()

    def _log_sigterm(signum, frame) -> None:
        logger.warning("Received signal %s, dumping stack.", signum)
        faulthandler.dump_traceback(file=sys.stderr, all_threads=True)

    signal.signal(signal.SIGTERM, _log_sigterm)
    app = QtWidgets.QApplication(sys.argv)
    window = MainWindow(settings)
    window.show()
    window.raise_()
    window.activateWindow()
    QtCore.QTimer.singleShot(0, window.activateWindow)
    app.exec()


if __name__ == "__main__":
    main()
