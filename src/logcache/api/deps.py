"""FastAPI 의존성 주입."""

from functools import lru_cache

from logcache.config import AppConfig
from logcache.infra.cloudwatch_client import CloudWatchLogsClient
from logcache.services.downloader import DownloaderService
from logcache.services.orchestrator import CacheOrchestrator
from logcache.services.pruner import PrunerService
from logcache.services.searcher import SearcherService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_remote_client() -> CloudWatchLogsClient:
    return CloudWatchLogsClient(get_config().aws_region)


@lru_cache
def get_orchestrator() -> CacheOrchestrator:
    """Process-wide orchestrator so per-shard download locks are shared by all requests."""
    config = get_config()
    downloader = DownloaderService(config, get_remote_client())
    return CacheOrchestrator(config, downloader, SearcherService())


def get_group_lister() -> CloudWatchLogsClient:
    return get_remote_client()


def get_pruner() -> PrunerService:
    return PrunerService(get_config())
