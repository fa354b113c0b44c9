"""캐시 서비스 간 데이터 교환을 위한 데이터 모델."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

# Remote events are opaque JSON objects; only "timestamp" (epoch ms) and
# "message" are interpreted by the cache.
LogEvent = dict[str, Any]


@dataclass(frozen=True)
class ShardKey:
    """하나의 log group의 하루치 (UTC) 캐시 단위."""

    group: str
    day: date

    def __str__(self) -> str:
        return f"{self.group}@{self.day.isoformat()}"


class ShardStatus(str, Enum):
    """ensure_shard 결과 상태."""

    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    EMPTY = "empty"
    ERROR = "error"


class MaterializeStatus(str, Enum):
    """materialize 전체 상태."""

    COMPLETED = "completed"
    PARTIAL = "partial"


@dataclass
class ShardResult:
    """단일 shard에 대한 Downloader 결과."""

    group: str
    day: date
    status: ShardStatus
    events_count: int = 0
    byte_size: int | None = None
    error: str | None = None

    @property
    def key(self) -> ShardKey:
        return ShardKey(self.group, self.day)

    def to_dict(self) -> dict:
        d: dict = {
            "group": self.group,
            "date": self.day.isoformat(),
            "status": self.status.value,
            "eventsCount": self.events_count,
        }
        if self.byte_size is not None:
            d["byteSize"] = self.byte_size
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass
class MaterializeSummary:
    total: int = 0
    downloaded: int = 0
    skipped: int = 0
    empty: int = 0
    errors: int = 0

    @classmethod
    def from_results(cls, results: list[ShardResult]) -> "MaterializeSummary":
        summary = cls(total=len(results))
        for r in results:
            if r.status == ShardStatus.DOWNLOADED:
                summary.downloaded += 1
            elif r.status == ShardStatus.SKIPPED:
                summary.skipped += 1
            elif r.status == ShardStatus.EMPTY:
                summary.empty += 1
            else:
                summary.errors += 1
        return summary


@dataclass
class MaterializeReport:
    """materialize 결과: 전체 상태 + shard별 결과 + 요약."""

    status: MaterializeStatus
    results: list[ShardResult] = field(default_factory=list)
    summary: MaterializeSummary = field(default_factory=MaterializeSummary)

    @classmethod
    def from_results(cls, results: list[ShardResult]) -> "MaterializeReport":
        summary = MaterializeSummary.from_results(results)
        status = MaterializeStatus.PARTIAL if summary.errors else MaterializeStatus.COMPLETED
        return cls(status=status, results=results, summary=summary)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "total": self.summary.total,
                "downloaded": self.summary.downloaded,
                "skipped": self.summary.skipped,
                "empty": self.summary.empty,
                "errors": self.summary.errors,
            },
        }
