import pytest

from txretry import RetryDecision, RetryPolicy, TxRetryError

from .fakes import DriverError, deadlock


def test_defaults():
    policy = RetryPolicy()

    assert policy.max_attempts == 5
    assert policy.backoff == 0.05
    assert policy.retryable_codes == ("40P01",)
    assert policy.follow_context is False

@pytest.mark.parametrize(
    "attempt,expected", ((1, 0.05), (2, 0.1), (3, 0.15), (4, 0.2))
)
def test_delay_is_linear_in_attempt(attempt, expected):
    assert RetryPolicy().delay_for(attempt) == pytest.approx(expected)


def test_delay_strictly_increases():
    policy = RetryPolicy()
    delays = [policy.delay_for(attempt) for attempt in range(1, 20)]

    assert all(a < b for a, b in zip(delays, delays[1:]))
    assert delays[0] >= 0.05


def test_delay_requires_positive_attempt():
    with pytest.raises(TxRetryError):
        RetryPolicy().delay_for(0)


def test_decide_retries_conflict_within_budget():
    decision = RetryPolicy().decide(deadlock(), 1)

    assert decision == RetryDecision(retry=True, delay=0.05, conflict=True)


def test_decide_gives_up_on_last_attempt():
    decision = RetryPolicy(max_attempts=3).decide(deadlock(), 3)

    assert decision == RetryDecision(retry=False, delay=0.0, conflict=True)


@pytest.mark.parametrize(
    "error",
    (
        ValueError("nope"),
        DriverError("serialization failure", "40001"),
        DriverError("no code"),
    ),
)
def test_decide_never_retries_non_conflicts(error):
    decision = RetryPolicy().decide(error, 1)

    assert not decision.retry
    assert not decision.conflict
    assert decision.delay == 0.0


def test_with_codes_adds_retryable_codes():
    policy = RetryPolicy().with_codes("40001", "40P01")

    assert policy.retryable_codes == ("40P01", "40001")
    assert policy.decide(DriverError("serialization", "40001"), 1).retry
    assert RetryPolicy().retryable_codes == ("40P01",)


def test_follow_context_classifies_implicit_chains():
    error = ValueError("raised while handling")
    error.__context__ = deadlock()

    assert not RetryPolicy().decide(error, 1).retry
    assert RetryPolicy(follow_context=True).decide(error, 1).retry


def test_codes_are_normalized_to_tuple():
    policy = RetryPolicy(retryable_codes=["40001"])

    assert policy.retryable_codes == ("40001",)
    assert hash(policy)


@pytest.mark.parametrize(
    "kwargs",
    (
        {"max_attempts": 0},
        {"max_attempts": 2.5},
        {"backoff": 0},
        {"backoff": -0.1},
        {"max_cause_depth": 0},
    ),
)
def test_invalid_configuration(kwargs):
    with pytest.raises(TxRetryError):
        RetryPolicy(**kwargs)
