"""Logger configuration driven by environment variables."""

import json
import logging
import os
import sys
from datetime import datetime

PACKAGE_LOGGER = "linkding_archiver"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def _extra_fields(record):
    return {key: value for key, value in vars(record).items() if key not in _RESERVED}


def _timestamp(record):
    moment = datetime.fromtimestamp(record.created).astimezone()
    return moment.isoformat(timespec="milliseconds")


def _level_name(levelno):
    return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno))


class _JsonFormatter(logging.Formatter):
    """One JSON object per record, extra attributes included."""

    def format(self, record):
        data = {
            "time": _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
        }
        data.update(_extra_fields(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def _text_value(value):
    text = value if isinstance(value, str) else str(value)
    if not text or any(char in text for char in ' ="\t\n'):
        return json.dumps(text)
    return text


class _TextFormatter(logging.Formatter):
    """Space separated key=value pairs per record."""

    def format(self, record):
        fields = {
            "time": _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
        }
        fields.update(_extra_fields(record))
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        return " ".join(f"{key}={_text_value(value)}" for key, value in fields.items())


def get_log_level():
    """Return the logging level named by ``LDPA_LOG_LEVEL`` (INFO by default)."""
    name = os.environ.get("LDPA_LOG_LEVEL", "").upper()
    return _LEVELS.get(name, logging.INFO)


def _is_terminal(stream):
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (ValueError, OSError):
        return False


def new_logger():
    """Configure and return the package logger writing to standard output.

    ``LDPA_LOG_FORMAT`` selects ``json`` or ``text``; otherwise text is used
    on a terminal and JSON elsewhere.
    """
    stream = sys.stdout
    log_format = os.environ.get("LDPA_LOG_FORMAT", "")
    if log_format == "json":
        formatter = _JsonFormatter()
    elif log_format == "text":
        formatter = _TextFormatter()
    elif _is_terminal(stream):
        formatter = _TextFormatter()
    else:
        formatter = _JsonFormatter()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(get_log_level())
    logger.propagate = False
    return logger