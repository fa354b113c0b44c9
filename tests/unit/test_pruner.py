from datetime import date, datetime, timedelta, timezone

from logcache.services.pruner import PrunerService

NOW = datetime(2025, 1, 20, 15, 30, tzinfo=timezone.utc)


def _touch_shard(cache_dir, group_dir: str, day: date):
    path = cache_dir / group_dir / f"{day.isoformat()}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text('{"timestamp": 1, "message": "x"}\n', encoding="utf-8")
    return path


class TestPrune:
    def test_retention_boundary(self, test_config, cache_dir):
        """cutoff 당일 shard는 유지, 그보다 하루 전 shard는 삭제."""
        at_cutoff = _touch_shard(cache_dir, "_svc_a", NOW.date() - timedelta(days=10))
        past_cutoff = _touch_shard(cache_dir, "_svc_a", NOW.date() - timedelta(days=11))
        today = _touch_shard(cache_dir, "_svc_a", NOW.date())

        removed = PrunerService(test_config).prune(now=NOW, retention_days=10)

        assert removed == 1
        assert at_cutoff.exists()
        assert today.exists()
        assert not past_cutoff.exists()

    def test_prunes_across_groups(self, test_config, cache_dir):
        old = NOW.date() - timedelta(days=30)
        _touch_shard(cache_dir, "_svc_a", old)
        _touch_shard(cache_dir, "_svc_b", old)
        assert PrunerService(test_config).prune(now=NOW) == 2

    def test_absent_cache_root(self, test_config, cache_dir):
        assert not cache_dir.exists()
        assert PrunerService(test_config).prune(now=NOW) == 0

    def test_skips_malformed_and_stray_entries(self, test_config, cache_dir):
        old = NOW.date() - timedelta(days=30)
        group = cache_dir / "_svc_a"
        group.mkdir(parents=True)
        (group / "notes.log").write_text("x", encoding="utf-8")
        (group / f"{old.isoformat()}.log.tmp").write_text("x", encoding="utf-8")
        (cache_dir / f"{old.isoformat()}.log").write_text("x", encoding="utf-8")

        assert PrunerService(test_config).prune(now=NOW) == 0
        assert (group / "notes.log").exists()
        assert (cache_dir / f"{old.isoformat()}.log").exists()

    def test_retention_defaults_to_config(self, test_config, cache_dir):
        config = test_config.model_copy(update={"retention_days": 2})
        kept = _touch_shard(cache_dir, "_svc_a", NOW.date() - timedelta(days=2))
        gone = _touch_shard(cache_dir, "_svc_a", NOW.date() - timedelta(days=3))

        assert PrunerService(config).prune(now=NOW) == 1
        assert kept.exists()
        assert not gone.exists()

    def test_aware_now_converted_to_utc(self, test_config, cache_dir):
        """cutoff는 UTC 날짜 기준: KST 01-20 01:00은 UTC 01-19."""
        kst = timezone(timedelta(hours=9))
        now_kst = datetime(2025, 1, 20, 1, 0, tzinfo=kst)  # 2025-01-19 16:00 UTC
        kept = _touch_shard(cache_dir, "_svc_a", date(2025, 1, 9))

        assert PrunerService(test_config).prune(now=now_kst, retention_days=10) == 0
        assert kept.exists()

    def test_stale_temp_files_follow_date_rule(self, test_config, cache_dir):
        group = cache_dir / "_svc_a"
        group.mkdir(parents=True)
        old_temp = group / f"{(NOW.date() - timedelta(days=30)).isoformat()}.log.tmp"
        recent_temp = group / f"{NOW.date().isoformat()}.log.tmp"
        old_temp.write_text("partial", encoding="utf-8")
        recent_temp.write_text("partial", encoding="utf-8")

        assert PrunerService(test_config).prune(now=NOW) == 0
        assert not old_temp.exists()
        assert recent_temp.exists()

    def test_emptied_group_dirs_removed(self, test_config, cache_dir):
        old = NOW.date() - timedelta(days=30)
        _touch_shard(cache_dir, "_svc_a", old)
        kept = _touch_shard(cache_dir, "_svc_b", NOW.date())
        (cache_dir / "_svc_c").mkdir()

        assert PrunerService(test_config).prune(now=NOW) == 1
        assert not (cache_dir / "_svc_a").exists()
        assert not (cache_dir / "_svc_c").exists()
        assert kept.exists()
