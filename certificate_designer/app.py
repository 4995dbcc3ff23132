from __future__ import annotations
import logging
import os
import sys
from PySide6.QtWidgets import QApplication
from .ui.main_window import create_window
from .ui import persistence

LOG_LEVEL_ENV = "CERTIFICATE_DESIGNER_LOG_LEVEL"


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    configure_logging()

    app = QApplication(sys.argv)
    app.setOrganizationName("CertificateDesigner")
    app.setApplicationName("CertificateDesigner")

    win = create_window()
    win.show()

    # optional: a template (.json) or a background document on the command line
    args = [a for a in sys.argv[1:] if not a.startswith("-")]
    if args:
        path = args[0]
        if path.lower().endswith(".json"):
            persistence.load_template_path(win, path)
        else:
            persistence.open_document_path(win, path)

    sys.exit(app.exec())

if __name__ == '__main__':
    main()
