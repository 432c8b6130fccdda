from __future__ import annotations

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from notes_client.settings import LOGGER_NAME, get_log_dir, get_log_path

SESSION_ID = uuid.uuid4().hex[:8]

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


class EnsureSessionFilter(logging.Filter):
    """Ensure record.session exists so Formatter never crashes."""
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session"):
            record.session = SESSION_ID
        return True


class SessionAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra.setdefault("session", SESSION_ID)
        return msg, kwargs


def setup_logging(*, console_level: int = logging.INFO) -> SessionAdapter:
    """
    Configure the package logger: rotating file + console.
    Modules log via logging.getLogger(__name__) and end up here.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Prevent duplicate handlers on repeated setup
    if logger.handlers:
        return SessionAdapter(logger, {})

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s | sid=%(session)s"
    )
    session_filter = EnsureSessionFilter()

    log_path = get_log_path()
    get_log_dir().mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        log_path, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)
    fh.addFilter(session_filter)

    # stderr keeps CLI stdout clean for command output
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(session_filter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.debug("Logging initialized. log_file=%s", log_path)
    return SessionAdapter(logger, {})


def qt_message_level(mode) -> int:
    """Logging level for a QtMsgType; anything unknown is a warning."""
    return _QT_LEVELS.get(mode, logging.WARNING)


def install_global_exception_hooks(log: logging.LoggerAdapter) -> None:
    """
    Install global Python + Qt exception hooks.
    """
    def _excepthook(exc_type, exc, tb):
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _excepthook

    # only QtCore runs here, so the message context is usually empty
    def _qt_message_handler(mode, context, message):
        log.log(qt_message_level(mode), "Qt: %s", message)

    try:
        qInstallMessageHandler(_qt_message_handler)
        log.debug("Qt message handler installed")
    except Exception:
        log.exception("Failed to install Qt message handler")
