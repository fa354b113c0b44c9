from datetime import date

from logcache.exceptions import (
    FetchCancelledError,
    FilesystemError,
    InvalidRequestError,
    LogCacheError,
    ParseError,
    ShardUnavailableError,
    UpstreamFetchError,
)


class TestHierarchy:
    def test_all_derive_from_base(self):
        for exc in (
            InvalidRequestError,
            UpstreamFetchError,
            FetchCancelledError,
            FilesystemError,
            ParseError,
            ShardUnavailableError,
        ):
            assert issubclass(exc, LogCacheError)

    def test_cancelled_is_upstream_failure(self):
        assert issubclass(FetchCancelledError, UpstreamFetchError)
        assert FetchCancelledError.step == "fetch"

    def test_steps(self):
        assert InvalidRequestError.step == "validate"
        assert FilesystemError.step == "write"
        assert ParseError.step == "search"


class TestShardUnavailableError:
    def test_attributes_and_message(self):
        err = ShardUnavailableError("/svc/a", date(2025, 1, 15), "throttled")
        assert err.group == "/svc/a"
        assert err.day == date(2025, 1, 15)
        assert err.cause == "throttled"
        assert str(err) == "Shard unavailable for '/svc/a' on 2025-01-15: throttled"
