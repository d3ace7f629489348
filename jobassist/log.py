"""Logging setup for the jobassist package (stdlib only).

Records go to stderr so the CLI can print JSON on stdout. A daily file
under ``logs/`` is added only when ``LOG_TO_FILE`` is set.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Named logger; the package logger is configured on first use."""
    if not _configured:
        configure()
    return logging.getLogger(name)


def configure(level: str | None = None, to_file: bool | None = None) -> logging.Logger:
    """(Re)configure the ``jobassist`` logger.

    *level* defaults to ``LOG_LEVEL`` (INFO); *to_file* defaults to the
    truthiness of ``LOG_TO_FILE``. Safe to call more than once: handlers
    installed by an earlier call are replaced.
    """
    global _configured
    _configured = True

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level_name, logging.INFO)
    if to_file is None:
        to_file = os.environ.get("LOG_TO_FILE", "").lower() in ("1", "true", "yes")

    pkg = logging.getLogger("jobassist")
    pkg.setLevel(numeric)
    for handler in list(pkg.handlers):
        if getattr(handler, "_jobassist", False):
            pkg.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric)
    console.setFormatter(formatter)
    console._jobassist = True
    pkg.addHandler(console)

    if to_file:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(LOG_DIR / f"jobassist_{date.today():%Y-%m-%d}.log", encoding="utf-8")
        except OSError as exc:
            pkg.warning("File logging disabled: %s", exc)
        else:
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(formatter)
            fh._jobassist = True
            pkg.addHandler(fh)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
    return pkg
