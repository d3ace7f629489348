import pytest

from jobassist.errors import ProviderMalformedResponse, ProviderUnreachable
from jobassist.retry import Backoff, backoff_delay, call_with_backoff

UNREACHABLE = (ProviderUnreachable,)


def test_retries_until_success():
    calls = []
    sleeps = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ProviderUnreachable("down")
        return "ok"

    policy = Backoff(attempts=3, base_delay=1.0, jitter=False)
    assert call_with_backoff(flaky, policy=policy, retryable=UNREACHABLE, sleep=sleeps.append) == "ok"
    assert len(calls) == 3
    assert sleeps == [1.0, 2.0]


def test_gives_up_after_max_attempts():
    sleeps = []

    def always_down():
        raise ProviderUnreachable("down")

    with pytest.raises(ProviderUnreachable):
        call_with_backoff(always_down, policy=Backoff(attempts=2, jitter=False),
                          retryable=UNREACHABLE, sleep=sleeps.append)
    assert len(sleeps) == 1


def test_non_retryable_errors_propagate_immediately():
    calls = []

    def malformed():
        calls.append(1)
        raise ProviderMalformedResponse("bad")

    with pytest.raises(ProviderMalformedResponse):
        call_with_backoff(malformed, policy=Backoff(attempts=5), retryable=UNREACHABLE, sleep=lambda s: None)
    assert len(calls) == 1


def test_backoff_is_capped():
    assert backoff_delay(10, 1.0, 30.0, 2.0, jitter=False) == 30.0


def test_policy_yields_one_wait_per_retry():
    assert list(Backoff(attempts=4, base_delay=0.5, jitter=False).waits()) == [0.5, 1.0, 2.0]
    assert list(Backoff(attempts=1).waits()) == []


def test_call_with_backoff_passes_arguments_through():
    seen = []

    def fetch(kind, query, page=1):
        seen.append((kind, query, page))
        if len(seen) == 1:
            raise ProviderUnreachable("timeout")
        return page

    result = call_with_backoff(
        fetch, "job", "python", page=3, policy=Backoff(attempts=2, jitter=False),
        retryable=UNREACHABLE, sleep=lambda s: None,
    )
    assert result == 3
    assert seen == [("job", "python", 3)] * 2
