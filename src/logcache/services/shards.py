"""Shard 주소 지정: (log group, UTC 날짜) → 캐시 파일 경로."""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterator
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")

SHARD_SUFFIX = ".log"
TEMP_SUFFIX = ".tmp"


def sanitize_group_name(group: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with '_'.

    >>> sanitize_group_name("/aws/ecs/my-app")
    '_aws_ecs_my-app'
    """
    return _UNSAFE_CHARS_RE.sub("_", group)


def parse_shard_date(path: Path) -> date | None:
    """'2025-01-15.log' → date(2025, 1, 15). 형식이 맞지 않으면 None."""
    if path.suffix != SHARD_SUFFIX:
        return None
    try:
        return date.fromisoformat(path.stem)
    except ValueError:
        return None


def parse_temp_date(path: Path) -> date | None:
    """'2025-01-15.log.tmp' → date(2025, 1, 15). 다운로드 중간 파일이 아니면 None."""
    if path.suffix != TEMP_SUFFIX:
        return None
    return parse_shard_date(path.with_name(path.name[: -len(TEMP_SUFFIX)]))


class ShardLocator:
    """캐시 루트 아래 shard 파일 경로를 계산한다.

    Layout: <cache_dir>/<sanitized group>/<YYYY-MM-DD>.log

    Two identifiers that differ only in replaced characters ("/svc/a" and
    "_svc_a") sanitize to the same directory. With ``hash_suffix=True`` the
    directory name carries the first 8 hex digits of the identifier's SHA-1.
    """

    def __init__(self, cache_dir: Path, *, hash_suffix: bool = False) -> None:
        self._cache_dir = cache_dir
        self._hash_suffix = hash_suffix

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def group_dir_name(self, group: str) -> str:
        name = sanitize_group_name(group)
        if self._hash_suffix:
            digest = hashlib.sha1(group.encode("utf-8")).hexdigest()[:8]
            name = f"{name}-{digest}"
        return name

    def group_dir(self, group: str) -> Path:
        """Group 디렉토리 경로. 없으면 생성 (동시 호출에도 안전)."""
        path = self._cache_dir / self.group_dir_name(group)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def shard_path(self, group: str, day: date) -> Path:
        return self.group_dir(group) / f"{day.isoformat()}{SHARD_SUFFIX}"

    @staticmethod
    def temp_path(shard_path: Path) -> Path:
        return shard_path.with_name(shard_path.name + TEMP_SUFFIX)

    def iter_group_dirs(self) -> Iterator[Path]:
        """캐시 루트 바로 아래 디렉토리들. 루트가 없으면 아무것도 yield하지 않음."""
        if not self._cache_dir.is_dir():
            return
        for entry in sorted(self._cache_dir.iterdir()):
            if not entry.is_dir():
                logger.debug("Skipping non-directory entry %s", entry)
                continue
            yield entry

    def iter_shard_files(self) -> Iterator[Path]:
        """캐시 루트 아래 모든 '*.log' 파일."""
        yield from self._iter_files(f"*{SHARD_SUFFIX}")

    def iter_temp_files(self) -> Iterator[Path]:
        """중단된 다운로드가 남긴 '*.log.tmp' 파일."""
        yield from self._iter_files(f"*{SHARD_SUFFIX}{TEMP_SUFFIX}")

    def _iter_files(self, pattern: str) -> Iterator[Path]:
        for group_dir in self.iter_group_dirs():
            for path in sorted(group_dir.glob(pattern)):
                if path.is_file():
                    yield path
