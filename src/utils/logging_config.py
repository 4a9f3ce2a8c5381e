"""Root logger setup for the CLI renderer and embedding hosts.

Library modules only ever call ``logging.getLogger(__name__)``; hosts call
``setup_logging()`` once to decide where those records go and how they
look.

Line formats:
    human  2026-10-19T13:45:12.345Z | INFO     | app=render size=800x400 | Rendered 800x400 ...
    json   {"t": "2026-10-19T13:45:12.345000+00:00", "lvl": "INFO", ..., "app": "render", "msg": "..."}

Context fields (``app``, ``config``, ``size``...) live in a ContextVar and
are appended to every line. Render tiles log from pool threads, which do not
inherit the caller's context, so tile lines carry only the static fields
pushed before the pool was created.

Public API:
    setup_logging(log_level="INFO", context={"app": "render"})
    get_logger(name)
    push_context(size="1920x1080") / pop_context(["size"])
    with render_context(config="double_slit_v1"): ...
    install_excepthook()
    shutdown()
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

_context_var: contextvars.ContextVar = contextvars.ContextVar('logging_context', default={})

# Set once setup_logging() has installed its handlers
_configured = False

_FORMAT_MODES = ("human", "json")


class ContextFormatter(logging.Formatter):
    """Render records as human pipe-separated lines or JSON objects.

    Parameters
    ----------
    fmt_mode : str
        ``"human"`` or ``"json"``
    use_color : bool
        Colorize the level name; only honored when stderr is a TTY
    tz : str
        ``"UTC"`` or ``"local"`` timestamps
    """

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC"):
        super().__init__()
        if fmt_mode not in _FORMAT_MODES:
            raise ValueError(f"Unknown format mode: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        if self.tz == "UTC":
            return datetime.fromtimestamp(record.created, tz=timezone.utc)
        return datetime.fromtimestamp(record.created)

    def format(self, record: logging.LogRecord) -> str:
        ts = self._timestamp(record)
        fields = _context_var.get()
        if self.fmt_mode == "json":
            return self._as_json(record, ts, fields)
        return self._as_line(record, ts, fields)

    def _as_json(self, record: logging.LogRecord, ts: datetime, fields: Dict[str, Any]) -> str:
        entry: Dict[str, Any] = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'thread': record.threadName,
            **fields,
            'msg': record.getMessage(),
        }
        if record.exc_info:
            entry['exc'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)

    def _as_line(self, record: logging.LogRecord, ts: datetime, fields: Dict[str, Any]) -> str:
        level = f"{record.levelname:8s}"
        if self.use_color:
            color = self.LEVEL_COLORS.get(record.levelname, '')
            level = f"{color}{level}{self.RESET}"

        columns = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', level]
        if fields:
            columns.append(' '.join(f"{key}={value}" for key, value in fields.items()))
        columns.append(record.getMessage())

        line = ' | '.join(columns)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    formatter: logging.Formatter
) -> logging.Handler:
    """Plain, size-rotating or time-rotating file handler.

    ``rotate`` examples::

        {"mode": "size", "max_bytes": 10_000_000, "backup_count": 5}
        {"mode": "time", "when": "D", "interval": 1, "backup_count": 7}
    """
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not rotate:
        handler: logging.Handler = logging.FileHandler(path)
    elif rotate.get('mode', 'size') == 'size':
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=rotate.get('max_bytes', 10_000_000),
            backupCount=rotate.get('backup_count', 5),
        )
    elif rotate['mode'] == 'time':
        handler = logging.handlers.TimedRotatingFileHandler(
            path,
            when=rotate.get('when', 'D'),
            interval=rotate.get('interval', 1),
            backupCount=rotate.get('backup_count', 7),
        )
    else:
        raise ValueError(f"Unknown rotation mode: {rotate['mode']}. Use 'size' or 'time'.")

    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Install console and/or file handlers on the root logger.

    Calling it again replaces the handlers installed by the previous call
    instead of stacking new ones.

    Parameters
    ----------
    log_level : str
        Root level name ("DEBUG" ... "CRITICAL")
    log_file : str, optional
        Also log to this file (parent directories are created)
    json : bool
        JSON lines instead of human lines, on every handler
    color : bool
        Colored level names on a TTY console
    to_stderr : bool
        Attach a stderr console handler
    rotate : dict, optional
        File rotation policy, see ``_file_handler``
    tz : str
        "UTC" or "local"
    capture_warnings : bool
        Route ``warnings.warn`` through the ``py.warnings`` logger
    quiet_libs : list[str], optional
        Loggers forced to WARNING (e.g. ``["PIL"]``, whose PNG plugin is
        chatty at DEBUG)
    context : dict, optional
        Fields pushed with ``push_context`` before returning

    Returns
    -------
    dict
        ``{"handlers": [...]}``, the handlers that were installed
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        for old in list(root.handlers):
            root.removeHandler(old)
            old.close()
    root.setLevel(getattr(logging, log_level.upper()))

    mode = "json" if json else "human"
    handlers: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter(mode, use_color=color, tz=tz))
        handlers.append(console)
    if log_file:
        handlers.append(
            _file_handler(log_file, rotate, ContextFormatter(mode, use_color=False, tz=tz))
        )
    for handler in handlers:
        root.addHandler(handler)

    for name in quiet_libs or ():
        logging.getLogger(name).setLevel(logging.WARNING)
    if capture_warnings:
        logging.captureWarnings(True)
    if context:
        push_context(**context)

    _configured = True
    return {'handlers': handlers}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**fields: Any) -> None:
    """Merge ``fields`` into the context appended to every log line."""
    _context_var.set({**_context_var.get(), **fields})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Drop the given context keys, or every key when ``keys`` is None."""
    if keys is None:
        _context_var.set({})
        return
    _context_var.set({k: v for k, v in _context_var.get().items() if k not in keys})


@contextmanager
def render_context(**fields: Any) -> Iterator[None]:
    """Scope context fields to a ``with`` block (e.g. one render).

    The previous context is restored on exit, even if the block raises.
    """
    token = _context_var.set({**_context_var.get(), **fields})
    try:
        yield
    finally:
        _context_var.reset(token)


def install_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL; Ctrl+C keeps the default hook."""
    def hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = hook


def shutdown() -> None:
    """Flush and close every handler; call once at the end of ``main()``."""
    logging.shutdown()
