"""Epoch-ms ↔ UTC 날짜 유틸리티 함수."""

from datetime import date, datetime, time, timedelta, timezone

DAY_MS = 24 * 60 * 60 * 1000


def to_utc_date(epoch_ms: int) -> date:
    """Epoch millis → UTC 날짜."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).date()


def day_start_ms(day: date) -> int:
    """UTC 자정의 epoch millis."""
    midnight = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return int(midnight.timestamp()) * 1000


def day_bounds(day: date) -> tuple[int, int]:
    """하루의 (첫 ms, 마지막 ms). 양 끝 포함."""
    start = day_start_ms(day)
    return start, start + DAY_MS - 1


def day_range(start_ms: int, end_ms: int) -> list[date]:
    """두 시각이 걸치는 UTC 날짜 리스트 (inclusive). start > end면 빈 리스트."""
    if start_ms > end_ms:
        return []
    current = to_utc_date(start_ms)
    last = to_utc_date(end_ms)
    result: list[date] = []
    while current <= last:
        result.append(current)
        current += timedelta(days=1)
    return result


def parse_time(value: str) -> int:
    """CLI 시간 인자 → epoch millis.

    Digits-only strings are taken as epoch millis. Anything else is parsed as
    ISO 8601; naive values are treated as UTC.
    """
    value = value.strip()
    if value.isdigit():
        return int(value)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def format_timestamp(epoch_ms: int) -> str:
    """Epoch millis → ISO 8601 (UTC, millisecond precision)."""
    dt = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
