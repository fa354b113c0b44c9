from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from logcache.config import AppConfig
from logcache.exceptions import UpstreamFetchError


@pytest.fixture(autouse=True)
def _use_test_env(monkeypatch):
    """모든 테스트에서 .env 대신 .env.test를 사용하도록 강제."""
    monkeypatch.setattr(
        AppConfig, "model_config", {**AppConfig.model_config, "env_file": ".env.test"}
    )


def ts(day: date, hour: int = 0, minute: int = 0) -> int:
    """UTC 날짜+시각 → epoch millis."""
    dt = datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)
    return int(dt.timestamp()) * 1000


class FakeLogClient:
    """In-memory LogPageFetcher. Pages are ``page_size`` events, token = next offset."""

    def __init__(self, events: dict[str, list[dict]] | None = None, page_size: int = 2) -> None:
        self.events = events or {}
        self.page_size = page_size
        self.calls: list[tuple[str, int, int, str | None]] = []
        # group → zero-based page index that raises UpstreamFetchError
        self.fail_at: dict[str, int] = {}

    def fetch_page(self, group, start_ms, end_ms, token=None):
        self.calls.append((group, start_ms, end_ms, token))
        offset = int(token) if token else 0
        page_index = offset // self.page_size
        if self.fail_at.get(group) == page_index:
            raise UpstreamFetchError(f"throttled on {group} page {page_index}")
        in_window = [
            e for e in self.events.get(group, []) if start_ms <= e["timestamp"] <= end_ms
        ]
        page = in_window[offset : offset + self.page_size]
        next_offset = offset + self.page_size
        return page, (str(next_offset) if next_offset < len(in_window) else None)

    def list_groups(self):
        return [{"logGroupName": g} for g in self.events]


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """테스트용 격리된 캐시 디렉토리 (아직 생성되지 않음)."""
    return tmp_path / "log_cache"


@pytest.fixture
def test_config(cache_dir: Path) -> AppConfig:
    """테스트용 AppConfig. 실제 .env 파일 불필요."""
    return AppConfig(cache_dir=cache_dir, retention_days=10, max_workers=1)


@pytest.fixture
def fake_client() -> FakeLogClient:
    return FakeLogClient()
