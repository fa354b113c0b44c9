"""원격 로그 API capability Protocol 정의."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from logcache.models import LogEvent


@runtime_checkable
class LogPageFetcher(Protocol):
    """Downloader가 소비하는 페이지 단위 fetch capability."""

    def fetch_page(
        self,
        group: str,
        start_ms: int,
        end_ms: int,
        token: str | None = None,
    ) -> tuple[list[LogEvent], str | None]: ...


@runtime_checkable
class LogGroupLister(Protocol):
    """호출자에게 보여줄 log group 목록 조회. 캐시 코어는 사용하지 않는다."""

    def list_groups(self) -> list[dict]: ...
