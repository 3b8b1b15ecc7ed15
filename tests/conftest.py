import os

import pytest

from txretry import RetryPolicy, TransactionCoordinator

from .fakes import FakeConnection, SleepRecorder

POSTGRES_DSN = os.environ.get("TXRETRY_POSTGRES_DSN", "")

requires_postgres = pytest.mark.skipif(
    not POSTGRES_DSN,
    reason="Set TXRETRY_POSTGRES_DSN to run against a live PostgreSQL",
)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def policy():
    return RetryPolicy()


@pytest.fixture
def coordinator(policy, sleep):
    return TransactionCoordinator(policy=policy, sleep=sleep)
