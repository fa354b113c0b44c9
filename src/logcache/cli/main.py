"""logcache CLI — Typer 기반.

download/search/groups call a running logcache HTTP server; prune works on the
local cache directory directly.
"""

import json
import logging
from datetime import datetime, timezone

import httpx
import typer

from logcache.config import AppConfig
from logcache.logging_config import configure_logging
from logcache.services import date_utils
from logcache.services.downloader import format_bytes
from logcache.services.pruner import PrunerService

logger = logging.getLogger(__name__)
_file_logger = logging.getLogger("logcache.cli.output")

app = typer.Typer(help="Local day-sharded cache for CloudWatch Logs")

REQUEST_TIMEOUT = 600.0
STATUS_MARKS = {"downloaded": "✓", "skipped": "⊘", "empty": "∅"}


def _echo(msg: str = "", err: bool = False) -> None:
    """Echo to terminal AND log to file."""
    typer.echo(msg, err=err)
    if msg:
        level = logging.ERROR if err else logging.INFO
        _file_logger.log(level, msg)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable DEBUG logging (overrides LOG_LEVEL)"
    ),
    log_file: bool = typer.Option(False, "--log-file", help="Also write DEBUG logs to LOG_DIR"),
) -> None:
    """Local day-sharded cache for CloudWatch Logs."""
    configure_logging(_get_config(), verbose=verbose, log_file=log_file)


def _get_config() -> AppConfig:
    return AppConfig()


def _get_http_client(config: AppConfig, server: str | None) -> httpx.Client:
    return httpx.Client(base_url=server or config.server_url, timeout=REQUEST_TIMEOUT)


def _fail(msg: str) -> None:
    _echo(f"Error: {msg}", err=True)
    raise typer.Exit(code=1)


def _resolve_groups(group: str | None, groups: str | None) -> list[str]:
    if groups:
        names = [g.strip() for g in groups.split(",") if g.strip()]
    elif group:
        names = [group]
    else:
        names = []
    if not names:
        _fail("At least one log group name is required (GROUP or --groups a,b)")
    return names


def _parse_time_option(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return date_utils.parse_time(value)
    except ValueError:
        _fail(f"Invalid date format: {value}")


def _post(config: AppConfig, server: str | None, path: str, payload: dict):
    try:
        with _get_http_client(config, server) as client:
            response = client.post(path, json=payload)
    except httpx.HTTPError as e:
        _fail(f"Could not reach logcache server: {e}")
    if response.status_code >= 400:
        _fail(f"{response.status_code} {response.reason_phrase}: {response.text}")
    return response.json()


@app.command()
def download(
    group: str = typer.Argument(default=None, help="Log group name"),
    groups: str = typer.Option(None, "--groups", "-g", help="Comma-separated log groups"),
    start: str = typer.Option(None, help="ISO date or epoch ms. Default: today 00:00 UTC"),
    end: str = typer.Option(None, help="ISO date or epoch ms. Default: today 23:59:59.999 UTC"),
    force: bool = typer.Option(False, "--force", "-f", help="Re-download even if cached"),
    server: str = typer.Option(None, help="logcache server URL. Default: SERVER_URL"),
) -> None:
    """Download logs into the server's cache without searching them."""
    names = _resolve_groups(group, groups)
    today = datetime.now(timezone.utc).date()
    day_start, day_end = date_utils.day_bounds(today)
    start_ms = _parse_time_option(start, day_start)
    end_ms = _parse_time_option(end, day_end)

    _echo("Downloading logs...")
    _echo(f"  Log Groups: {', '.join(names)}")
    _echo(f"  Start Time: {date_utils.format_timestamp(start_ms)}")
    _echo(f"  End Time: {date_utils.format_timestamp(end_ms)}")
    if force:
        _echo("  Force: true (will re-download cached logs)")

    config = _get_config()
    result = _post(
        config,
        server,
        "/download",
        {"logGroupNames": names, "startTime": start_ms, "endTime": end_ms, "force": force},
    )

    summary = result["summary"]
    _echo(f"\nStatus: {result['status'].upper()}")
    _echo(
        f"Shards: {summary['total']} total, {summary['downloaded']} downloaded, "
        f"{summary['skipped']} skipped, {summary['empty']} empty, {summary['errors']} errors"
    )

    total_size = 0
    for r in result["results"]:
        mark = STATUS_MARKS.get(r["status"], "✗")
        size = r.get("byteSize")
        size_str = f", {format_bytes(size)}" if size is not None else ""
        total_size += size or 0
        _echo(
            f"  {mark} {r['group']} {r['date']} - {r['status']} "
            f"({r['eventsCount']} events{size_str})"
        )
        if r.get("error"):
            _echo(f"    Error: {r['error']}")
    if total_size:
        _echo(f"\nTotal size: {format_bytes(total_size)}")

    if summary["errors"]:
        raise typer.Exit(code=1)


@app.command()
def search(
    group: str = typer.Argument(default=None, help="Log group name"),
    groups: str = typer.Option(None, "--groups", "-g", help="Comma-separated log groups"),
    start: str = typer.Option(None, help="ISO date or epoch ms. Default: 24 hours ago"),
    end: str = typer.Option(None, help="ISO date or epoch ms. Default: now"),
    filter: str = typer.Option(None, "--filter", help="Regex matched against messages"),
    server: str = typer.Option(None, help="logcache server URL. Default: SERVER_URL"),
) -> None:
    """Search cached logs, downloading missing days first."""
    names = _resolve_groups(group, groups)
    now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    start_ms = _parse_time_option(start, now_ms - date_utils.DAY_MS)
    end_ms = _parse_time_option(end, now_ms)

    config = _get_config()
    events = _post(
        config,
        server,
        "/search",
        {
            "logGroupNames": names,
            "startTime": start_ms,
            "endTime": end_ms,
            "filterPattern": filter,
        },
    )

    _echo(f"Found {len(events)} log events")
    for i, event in enumerate(events, start=1):
        _echo("─" * 80)
        _echo(f"[{i}] {date_utils.format_timestamp(event['timestamp'])}")
        _echo(f"Log Stream: {event.get('logStreamName', 'N/A')}")
        _echo(f"Message: {_pretty_message(event.get('message', ''))}")


def _pretty_message(message: str) -> str:
    """JSON 메시지는 들여쓰기해서 출력."""
    try:
        parsed = json.loads(message)
    except (TypeError, ValueError):
        return message
    if not isinstance(parsed, (dict, list)):
        return message
    return "\n" + json.dumps(parsed, indent=2, ensure_ascii=False)


@app.command("groups")
def list_groups(
    server: str = typer.Option(None, help="logcache server URL. Default: SERVER_URL"),
) -> None:
    """List log groups visible to the server."""
    config = _get_config()
    try:
        with _get_http_client(config, server) as client:
            response = client.get("/log-groups")
    except httpx.HTTPError as e:
        _fail(f"Could not reach logcache server: {e}")
    if response.status_code >= 400:
        _fail(f"{response.status_code} {response.reason_phrase}: {response.text}")
    for g in response.json():
        _echo(g.get("logGroupName", str(g)))


@app.command()
def prune(
    retention_days: int = typer.Option(None, "--retention-days", help="Default: RETENTION_DAYS"),
) -> None:
    """Delete cached shards older than the retention horizon."""
    config = _get_config()
    removed = PrunerService(config).prune(retention_days=retention_days)
    _echo(f"Pruned {removed} shard(s) from {config.cache_dir}")
