"""logcache 예외 계층.

계층 구조:
    LogCacheError
    ├── InvalidRequestError     (Orchestrator/Searcher: 잘못된 입력, I/O 이전에 거부)
    ├── UpstreamFetchError      (Downloader: 원격 로그 API 실패)
    │   └── FetchCancelledError (Downloader: deadline 초과 또는 취소)
    ├── FilesystemError         (Downloader: mkdir/write/rename 실패)
    ├── ParseError              (Searcher: shard 내 잘못된 라인)
    └── ShardUnavailableError   (Orchestrator: query 중 shard 확보 실패)
"""

from datetime import date


class LogCacheError(Exception):
    """logcache의 모든 예외의 기반 클래스."""


class InvalidRequestError(LogCacheError):
    """빈 group 목록, 누락된 시간 범위 등 잘못된 요청."""

    step = "validate"


class UpstreamFetchError(LogCacheError):
    """원격 로그 API 호출 실패."""

    step = "fetch"


class FetchCancelledError(UpstreamFetchError):
    """Deadline 초과 또는 호출자 취소로 drain이 중단됨."""


class FilesystemError(LogCacheError):
    """Shard 디렉토리 생성, 쓰기, rename 실패."""

    step = "write"


class ParseError(LogCacheError):
    """Shard 파일의 한 라인을 LogEvent로 해석할 수 없음."""

    step = "search"


class ShardUnavailableError(LogCacheError):
    """query 도중 shard를 확보하지 못함. Orchestrator가 발생시킨다."""

    def __init__(self, group: str, day: date, cause: str):
        self.group = group
        self.day = day
        self.cause = cause
        super().__init__(f"Shard unavailable for '{group}' on {day.isoformat()}: {cause}")
