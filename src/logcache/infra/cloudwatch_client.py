"""AWS CloudWatch Logs client: page-wise event fetch + log group discovery."""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from logcache.exceptions import UpstreamFetchError
from logcache.models import LogEvent

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10
READ_TIMEOUT = 60


class CloudWatchLogsClient:
    """boto3 'logs' client wrapper implementing LogPageFetcher / LogGroupLister.

    Retries stay inside botocore's own retry policy; a failure that survives
    it is raised as UpstreamFetchError and the cache does not retry further.
    """

    def __init__(self, region: str | None = None, client=None) -> None:
        if client is None:
            client = boto3.client(
                "logs",
                region_name=region,
                config=Config(
                    connect_timeout=CONNECT_TIMEOUT,
                    read_timeout=READ_TIMEOUT,
                    retries={"mode": "standard"},
                ),
            )
        self._client = client

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Public API ──

    def fetch_page(
        self,
        group: str,
        start_ms: int,
        end_ms: int,
        token: str | None = None,
    ) -> tuple[list[LogEvent], str | None]:
        """FilterLogEvents 한 페이지. (events, nextToken | None) 반환."""
        params: dict = {"logGroupName": group, "startTime": start_ms, "endTime": end_ms}
        if token:
            params["nextToken"] = token
        logger.debug("FilterLogEvents %s [%d, %d] token=%s", group, start_ms, end_ms, bool(token))
        response = self._call("filter_log_events", **params)
        return response.get("events", []), response.get("nextToken")

    def list_groups(self) -> list[dict]:
        """DescribeLogGroups 전체 페이지."""
        groups: list[dict] = []
        token: str | None = None
        while True:
            params = {"nextToken": token} if token else {}
            response = self._call("describe_log_groups", **params)
            groups.extend(response.get("logGroups", []))
            token = response.get("nextToken")
            if not token:
                break
        logger.debug("DescribeLogGroups → %d groups", len(groups))
        return groups

    # ── Internal ──

    def _call(self, operation: str, **params) -> dict:
        try:
            return getattr(self._client, operation)(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise UpstreamFetchError(f"CloudWatch {operation} failed ({code}): {e}") from e
        except BotoCoreError as e:
            raise UpstreamFetchError(f"CloudWatch {operation} failed: {e}") from e
