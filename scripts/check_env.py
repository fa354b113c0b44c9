#!/usr/bin/env python3
"""Validate configuration: config loading, cache directory, CloudWatch connection."""

import sys


def check_config():
    """1단계: .env 로드 및 설정값 출력."""
    print("[1/3] Loading config from .env ...")
    try:
        from logcache.config import AppConfig

        config = AppConfig()
        print(f"  CACHE_DIR       = {config.cache_dir}")
        print(f"  RETENTION_DAYS  = {config.retention_days}")
        print(f"  AWS_REGION      = {config.aws_region or '(boto3 default)'}")
        print(f"  SERVER_URL      = {config.server_url}")
        print("  => OK")
        return config
    except Exception as e:
        print(f"  => FAIL: {e}")
        return None


def check_cache_dir(config):
    """2단계: 캐시 디렉토리 쓰기 가능 여부."""
    print("\n[2/3] Checking cache directory ...")
    try:
        config.cache_dir.mkdir(parents=True, exist_ok=True)
        probe = config.cache_dir / ".write_probe"
        probe.write_text("", encoding="utf-8")
        probe.unlink()
        shard_count = sum(1 for _ in config.cache_dir.glob("*/*.log"))
        print(f"  Cached shards: {shard_count}")
        print("  => OK")
        return True
    except Exception as e:
        print(f"  => FAIL: {e}")
        return False


def check_cloudwatch(config):
    """3단계: CloudWatch Logs 연결 확인."""
    print("\n[3/3] Testing CloudWatch Logs connection ...")
    try:
        from logcache.infra.cloudwatch_client import CloudWatchLogsClient

        with CloudWatchLogsClient(config.aws_region) as client:
            groups = client.list_groups()
            print(f"  Visible log groups: {len(groups)}")
            print("  => OK")
            return True
    except Exception as e:
        print(f"  => FAIL: {e}")
        return False


def main():
    config = check_config()
    if config is None:
        print("\nResult: config loading failed. Check your .env.")
        sys.exit(1)

    cache_ok = check_cache_dir(config)
    cw_ok = check_cloudwatch(config)

    print("\n" + "=" * 40)
    print("  Config     : OK")
    print(f"  Cache dir  : {'OK' if cache_ok else 'FAIL'}")
    print(f"  CloudWatch : {'OK' if cw_ok else 'FAIL'}")
    print("=" * 40)

    if cache_ok and cw_ok:
        print("All checks passed!")
    else:
        print("Some checks failed. Review the errors above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
