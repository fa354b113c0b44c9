"""로컬 shard 파일 선형 검색 서비스."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from logcache.exceptions import InvalidRequestError, ParseError
from logcache.models import LogEvent

logger = logging.getLogger(__name__)


def parse_event_line(line: str | bytes) -> LogEvent:
    """Shard 한 줄 → LogEvent. UTF-8이 아니거나 timestamp가 정수가 아니면 ParseError."""
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"invalid UTF-8: {e}") from e
    try:
        event = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}") from e
    if not isinstance(event, dict):
        raise ParseError(f"expected an object, got {type(event).__name__}")
    ts = event.get("timestamp")
    if not isinstance(ts, int) or isinstance(ts, bool):
        raise ParseError(f"missing or non-integer timestamp: {ts!r}")
    return event


def compile_pattern(pattern: str | None) -> re.Pattern | None:
    """빈 패턴은 필터 없음. 잘못된 정규식은 InvalidRequestError."""
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidRequestError(f"Invalid filter pattern {pattern!r}: {e}") from e


class SearcherService:
    """Shard 파일을 한 줄씩 스트리밍하며 시간 범위/패턴으로 필터링.

    Never downloads: paths that do not exist are skipped.
    """

    def search(
        self,
        shard_paths: Iterable[Path],
        pattern: str | None,
        window_start: int,
        window_end: int,
    ) -> list[LogEvent]:
        regex = compile_pattern(pattern)
        matches: list[LogEvent] = []
        scanned = 0
        for path in shard_paths:
            if not path.exists():
                logger.debug("Shard %s not present, skipping", path)
                continue
            scanned += 1
            for event in self._iter_events(path):
                if not window_start <= event["timestamp"] <= window_end:
                    continue
                if regex is not None and not regex.search(_message_of(event)):
                    continue
                matches.append(event)

        # list.sort is stable: ties keep shard order, then line order
        matches.sort(key=lambda e: e["timestamp"])
        logger.info("Search matched %d events across %d shards", len(matches), scanned)
        return matches

    @staticmethod
    def _iter_events(path: Path) -> Iterator[LogEvent]:
        with open(path, "rb") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield parse_event_line(line)
                except ParseError as e:
                    logger.warning("Skipping line %d in %s: %s", lineno, path, e)


def _message_of(event: LogEvent) -> str:
    message = event.get("message")
    if message is None:
        return ""
    return message if isinstance(message, str) else str(message)
