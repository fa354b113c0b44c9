"""원격 로그 API → 로컬 shard 다운로드 서비스.

A shard is drained page by page into ``<shard>.tmp`` and published with a
single ``os.replace``. Readers therefore see either no shard, the previous
complete shard, or the new complete shard. A ``.tmp`` file found before a
download starts is left over from an interrupted attempt and is discarded.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path

from logcache.config import AppConfig
from logcache.exceptions import FetchCancelledError, FilesystemError, UpstreamFetchError
from logcache.models import ShardKey, ShardResult, ShardStatus
from logcache.services.date_utils import day_bounds
from logcache.services.protocols import LogPageFetcher
from logcache.services.shards import ShardLocator

logger = logging.getLogger(__name__)


def format_bytes(num_bytes: int) -> str:
    """1536 → '1.5 KB'."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{round(size, 2):g} {unit}"
        size /= 1024
    return f"{num_bytes} B"


class DownloaderService:
    def __init__(
        self,
        config: AppConfig,
        client: LogPageFetcher,
        locator: ShardLocator | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._locator = locator or ShardLocator(
            config.cache_dir, hash_suffix=config.hash_group_dirs
        )
        # ShardKey → [lock, waiters]. Entries are dropped when nobody holds them.
        self._locks: dict[ShardKey, list] = {}
        self._locks_guard = threading.Lock()

    @property
    def locator(self) -> ShardLocator:
        return self._locator

    def ensure_shard(
        self,
        group: str,
        day: date,
        force: bool = False,
        cancel: threading.Event | None = None,
    ) -> ShardResult:
        """
        Shard가 디스크에 존재하도록 보장.

        Args:
            group: 원격 log group 이름 (sanitize 전 원본)
            day: UTC 날짜
            force: True면 이미 있는 shard도 다시 다운로드
            cancel: set되면 다음 페이지 전에 drain 중단

        Returns:
            ShardResult. 실패는 예외가 아니라 status=ERROR로 반환된다.
        """
        key = ShardKey(group, day)
        with self._shard_lock(key):
            try:
                shard = self._locator.shard_path(group, day)
            except OSError as e:
                return self._failed(key, FilesystemError(f"Cannot create group directory: {e}"))

            if not force and shard.exists():
                return self._describe_existing(key, shard)
            return self._download(key, shard, cancel)

    # ── Internal ──

    @contextmanager
    def _shard_lock(self, key: ShardKey) -> Iterator[None]:
        """같은 ShardKey에 대한 ensure_shard 호출을 직렬화 (single-flight)."""
        with self._locks_guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def _describe_existing(self, key: ShardKey, shard: Path) -> ShardResult:
        try:
            events_count = 0
            with open(shard, "rb") as f:
                for line in f:
                    if line.strip():
                        events_count += 1
            byte_size = shard.stat().st_size
        except OSError as e:
            return self._failed(key, FilesystemError(f"Cannot read shard {shard}: {e}"))

        logger.debug("Shard %s already cached (%d events)", key, events_count)
        return ShardResult(
            key.group,
            key.day,
            ShardStatus.SKIPPED,
            events_count=events_count,
            byte_size=byte_size,
        )

    def _download(
        self, key: ShardKey, shard: Path, cancel: threading.Event | None
    ) -> ShardResult:
        temp = self._locator.temp_path(shard)
        if temp.exists():
            logger.warning("Discarding incomplete download %s", temp)
            self._discard(temp)

        logger.info("Downloading logs for %s", key)
        published = False
        try:
            events_count = self._drain(key, temp, cancel)
            os.replace(temp, shard)
            published = True
            byte_size = shard.stat().st_size
        except UpstreamFetchError as e:
            logger.warning("Download failed for %s: %s", key, e)
            return self._failed(key, e)
        except (TypeError, ValueError) as e:
            err = UpstreamFetchError(f"Cannot serialize event for {key}: {e}")
            logger.error("%s", err)
            return self._failed(key, err)
        except OSError as e:
            err = FilesystemError(f"Failed to write shard {shard}: {e}")
            logger.error("%s", err)
            return self._failed(key, err)
        finally:
            if not published:
                self._discard(temp)

        if events_count:
            logger.info(
                "Cached %d log events (%s) for %s → %s",
                events_count,
                format_bytes(byte_size),
                key,
                shard,
            )
            status = ShardStatus.DOWNLOADED
        else:
            logger.info("No logs for %s, wrote empty marker", key)
            status = ShardStatus.EMPTY
        return ShardResult(
            key.group, key.day, status, events_count=events_count, byte_size=byte_size
        )

    def _drain(self, key: ShardKey, temp: Path, cancel: threading.Event | None) -> int:
        """모든 페이지를 temp 파일에 한 줄씩 기록. 기록한 이벤트 수 반환."""
        start_ms, end_ms = day_bounds(key.day)
        timeout = self._config.fetch_timeout
        deadline = time.monotonic() + timeout if timeout else None

        events_count = 0
        pages = 0
        token: str | None = None
        with open(temp, "w", encoding="utf-8", newline="\n") as f:
            while True:
                if cancel is not None and cancel.is_set():
                    raise FetchCancelledError(f"Download cancelled after {pages} pages")
                if deadline is not None and time.monotonic() > deadline:
                    raise FetchCancelledError(
                        f"Download exceeded {timeout}s deadline after {pages} pages"
                    )

                events, token = self._fetch_page(key, start_ms, end_ms, token)
                pages += 1
                for event in events:
                    f.write(json.dumps(event, ensure_ascii=False))
                    f.write("\n")
                events_count += len(events)
                logger.debug("Page %d for %s: %d events", pages, key, len(events))
                if not token:
                    break
            f.flush()
            os.fsync(f.fileno())
        return events_count

    def _fetch_page(
        self, key: ShardKey, start_ms: int, end_ms: int, token: str | None
    ) -> tuple[list, str | None]:
        try:
            return self._client.fetch_page(key.group, start_ms, end_ms, token)
        except UpstreamFetchError:
            raise
        except Exception as e:
            raise UpstreamFetchError(f"Remote fetch failed for {key}: {e}") from e

    @staticmethod
    def _discard(temp: Path) -> None:
        try:
            temp.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", temp, e)

    @staticmethod
    def _failed(key: ShardKey, error: Exception) -> ShardResult:
        return ShardResult(key.group, key.day, ShardStatus.ERROR, error=str(error))
