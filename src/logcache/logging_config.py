"""logcache 로깅 설정.

All package loggers live under ``logcache``. Shard downloads run on a thread
pool, so every record carries the thread name next to the module name.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from logcache.config import AppConfig

ROOT_LOGGER = "logcache"
NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3")

_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s|%(threadName)s] %(message)s"

_console_handler: logging.Handler | None = None
_file_handlers: dict[Path, logging.FileHandler] = {}


def _resolve_level(level: int | str) -> int:
    """'debug' / 'INFO' / 10 → logging 레벨 정수."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str = logging.INFO) -> logging.Handler:
    """stderr 핸들러 설치. 이미 설치돼 있으면 레벨만 갱신한다.

    stdout stays reserved for CLI output. Third-party HTTP/AWS loggers are
    held at WARNING so page-by-page request logs don't drown shard progress.
    """
    global _console_handler
    resolved = _resolve_level(level)
    root = logging.getLogger(ROOT_LOGGER)
    # an attached file handler keeps receiving DEBUG records
    root.setLevel(logging.DEBUG if _file_handlers else resolved)

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stderr)
        _console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(_console_handler)
    _console_handler.setLevel(resolved)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return _console_handler


def setup_file_logging(log_dir: Path) -> logging.FileHandler:
    """<log_dir>/logcache-YYYYMMDD_HHMMSS.log 에 DEBUG 로그 기록.

    One handler per directory: calling again with the same ``log_dir``
    returns the existing handler.
    """
    log_dir = log_dir.resolve()
    existing = _file_handlers.get(log_dir)
    if existing is not None:
        return existing

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    handler = logging.FileHandler(log_dir / f"logcache-{timestamp}.log", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger(ROOT_LOGGER)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    _file_handlers[log_dir] = handler
    return handler


def configure_logging(
    config: AppConfig, *, verbose: bool = False, log_file: bool = False
) -> logging.FileHandler | None:
    """AppConfig 기준으로 콘솔(+파일) 로깅 구성.

    ``verbose`` forces DEBUG on the console; otherwise ``config.log_level``
    applies. A file handler under ``config.log_dir`` is added when
    ``log_file`` or ``config.log_to_file`` is set.
    """
    level = logging.DEBUG if verbose else _resolve_level(config.log_level)
    setup_logging(level)
    if log_file or config.log_to_file:
        return setup_file_logging(config.log_dir)
    return None


def reset_logging() -> None:
    """테스트용: 설치한 핸들러를 모두 닫고 제거."""
    global _console_handler
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    _console_handler = None
    _file_handlers.clear()
    root.setLevel(logging.WARNING)
