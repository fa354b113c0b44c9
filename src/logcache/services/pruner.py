"""보존 기간이 지난 shard 삭제."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from logcache.config import AppConfig
from logcache.services.shards import ShardLocator, parse_shard_date, parse_temp_date

logger = logging.getLogger(__name__)


class PrunerService:
    """Deletes shards whose encoded date is strictly older than the cutoff.

    Stale ``.log.tmp`` files follow the same date rule, and group directories
    left empty are removed.

    cutoff = UTC date of ``now`` minus ``retention_days``. A shard dated
    exactly at the cutoff is kept. Access recency is never considered.
    """

    def __init__(self, config: AppConfig, locator: ShardLocator | None = None) -> None:
        self._config = config
        self._locator = locator or ShardLocator(
            config.cache_dir, hash_suffix=config.hash_group_dirs
        )

    def prune(self, now: datetime | None = None, retention_days: int | None = None) -> int:
        """Returns the number of shard files removed."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        if retention_days is None:
            retention_days = self._config.retention_days

        cutoff = now.date() - timedelta(days=retention_days)
        logger.info("Pruning shards older than %s (%d days)", cutoff, retention_days)

        removed = 0
        for shard in self._locator.iter_shard_files():
            if self._remove_if_old(shard, parse_shard_date(shard), cutoff):
                removed += 1

        # leftovers of downloads that crashed and were never retried
        stale_temps = 0
        for temp in self._locator.iter_temp_files():
            if self._remove_if_old(temp, parse_temp_date(temp), cutoff):
                stale_temps += 1

        empty_dirs = self._remove_empty_group_dirs()

        if removed or stale_temps or empty_dirs:
            logger.info(
                "Cache pruning complete: removed %d shard(s), %d stale temp file(s), "
                "%d empty group dir(s)",
                removed,
                stale_temps,
                empty_dirs,
            )
        else:
            logger.info("No old shards to prune")
        return removed

    @staticmethod
    def _remove_if_old(path: Path, file_date: date | None, cutoff: date) -> bool:
        if file_date is None:
            logger.debug("Skipping unrecognized file %s", path)
            return False
        if file_date >= cutoff:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to prune %s: %s", path, e)
            return False
        logger.debug("Pruned %s (date %s)", path, file_date)
        return True

    def _remove_empty_group_dirs(self) -> int:
        count = 0
        for group_dir in self._locator.iter_group_dirs():
            if any(group_dir.iterdir()):
                continue
            try:
                group_dir.rmdir()
            except OSError as e:
                # a download may have just created a file in it
                logger.debug("Keeping group dir %s: %s", group_dir, e)
                continue
            count += 1
        return count
