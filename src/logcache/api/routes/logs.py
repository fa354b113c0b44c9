"""로그 검색/다운로드 엔드포인트."""

import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from logcache.api.deps import get_orchestrator
from logcache.services.orchestrator import CacheOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


class LogRangeRequest(BaseModel):
    log_group_names: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("logGroupNames", "log_group_names"),
    )
    start_time: int | None = Field(
        default=None, validation_alias=AliasChoices("startTime", "start_time")
    )
    end_time: int | None = Field(
        default=None, validation_alias=AliasChoices("endTime", "end_time")
    )


class SearchRequest(LogRangeRequest):
    filter_pattern: str | None = Field(
        default=None, validation_alias=AliasChoices("filterPattern", "filter_pattern")
    )


class DownloadRequest(LogRangeRequest):
    force: bool = False


@router.post("/search")
def search_logs(
    body: SearchRequest,
    orchestrator: CacheOrchestrator = Depends(get_orchestrator),
):
    """필요한 shard를 확보한 뒤 로컬 검색. timestamp 오름차순 이벤트 목록."""
    return orchestrator.query(
        body.log_group_names, body.start_time, body.end_time, body.filter_pattern
    )


@router.post("/download")
def download_logs(
    body: DownloadRequest,
    orchestrator: CacheOrchestrator = Depends(get_orchestrator),
):
    """검색 없이 shard만 확보. shard별 결과 + 요약 반환."""
    report = orchestrator.materialize(
        body.log_group_names, body.start_time, body.end_time, force=body.force
    )
    return report.to_dict()
