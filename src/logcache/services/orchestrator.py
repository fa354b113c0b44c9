"""groups × 날짜 확장 → Downloader → Searcher 오케스트레이션."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from logcache.config import AppConfig
from logcache.exceptions import InvalidRequestError, ShardUnavailableError
from logcache.models import LogEvent, MaterializeReport, ShardKey, ShardResult, ShardStatus
from logcache.services.date_utils import day_range
from logcache.services.downloader import DownloaderService
from logcache.services.searcher import SearcherService, compile_pattern

logger = logging.getLogger(__name__)


class CacheOrchestrator:
    def __init__(
        self,
        config: AppConfig,
        downloader: DownloaderService,
        searcher: SearcherService | None = None,
    ) -> None:
        self._config = config
        self._downloader = downloader
        self._searcher = searcher or SearcherService()

    def materialize(
        self,
        groups: list[str],
        start_time: int | None,
        end_time: int | None,
        force: bool = False,
        cancel: threading.Event | None = None,
    ) -> MaterializeReport:
        """
        요청 범위의 모든 shard를 로컬에 확보. 검색은 하지 않는다.

        A failing shard never stops the others; the report is ``partial``
        when any shard ended in error.
        """
        keys = self.shard_keys(groups, start_time, end_time)
        logger.info(
            "Materialize %d shards (%d groups, force=%s)", len(keys), len(groups), force
        )
        results = self._ensure_all(keys, force=force, cancel=cancel)
        report = MaterializeReport.from_results(results)
        logger.info(
            "Materialize %s: %d downloaded, %d skipped, %d empty, %d errors",
            report.status.value,
            report.summary.downloaded,
            report.summary.skipped,
            report.summary.empty,
            report.summary.errors,
        )
        return report

    def query(
        self,
        groups: list[str],
        start_time: int | None,
        end_time: int | None,
        pattern: str | None = None,
        cancel: threading.Event | None = None,
    ) -> list[LogEvent]:
        """
        필요한 shard를 확보한 뒤 로컬 검색.

        Raises:
            InvalidRequestError: 입력이 잘못됐거나 패턴이 정규식이 아님
            ShardUnavailableError: shard 하나라도 확보 실패 (fail-fast)
        """
        keys = self.shard_keys(groups, start_time, end_time)
        compile_pattern(pattern)
        logger.info("Query %d shards (pattern=%r)", len(keys), pattern)

        results = self._ensure_all(keys, force=False, cancel=cancel)
        for r in results:
            if r.status == ShardStatus.ERROR:
                logger.warning("Query aborted, shard %s unavailable: %s", r.key, r.error)
                raise ShardUnavailableError(r.group, r.day, r.error or "unknown error")

        locator = self._downloader.locator
        paths: list[Path] = [locator.shard_path(k.group, k.day) for k in keys]
        return self._searcher.search(paths, pattern, start_time, end_time)

    def shard_keys(
        self, groups: list[str], start_time: int | None, end_time: int | None
    ) -> list[ShardKey]:
        """입력 검증 + (group × UTC 날짜) 목록. group 순서 우선, 중복 group 제거."""
        if not groups:
            raise InvalidRequestError("logGroupNames must be a non-empty list")
        if any(not isinstance(g, str) or not g.strip() for g in groups):
            raise InvalidRequestError("logGroupNames must not contain blank names")
        if start_time is None or end_time is None:
            raise InvalidRequestError("startTime and endTime are required")
        if start_time > end_time:
            raise InvalidRequestError("startTime must not be after endTime")

        try:
            days = day_range(start_time, end_time)
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidRequestError(f"startTime/endTime out of range: {e}") from e
        unique_groups = list(dict.fromkeys(groups))
        return [ShardKey(g, d) for g in unique_groups for d in days]

    def _ensure_all(
        self, keys: list[ShardKey], force: bool, cancel: threading.Event | None
    ) -> list[ShardResult]:
        """Shard별 Downloader 호출. 결과는 keys 순서를 유지한다."""
        workers = min(self._config.max_workers, len(keys))
        if workers <= 1:
            return [self._ensure_one(k, force, cancel) for k in keys]

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="shard-worker"
        ) as executor:
            futures = [executor.submit(self._ensure_one, k, force, cancel) for k in keys]
            return [f.result() for f in futures]

    def _ensure_one(
        self, key: ShardKey, force: bool, cancel: threading.Event | None
    ) -> ShardResult:
        return self._downloader.ensure_shard(key.group, key.day, force=force, cancel=cancel)
