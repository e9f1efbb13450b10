"""Shared test fixtures for all test modules."""

from collections.abc import Sequence

import pytest

from statsd_cloudwatch.config import BackendConfig
from statsd_cloudwatch.core.aggregator import Aggregator
from statsd_cloudwatch.core.models import Credentials, MetricRecord
from statsd_cloudwatch.core.registry import MetricRegistry
from statsd_cloudwatch.errors import CredentialFetchError, SubmissionError
from statsd_cloudwatch.events import FlushEmitter

# 2024-01-01T00:00:00Z
FLUSH_TIME = 1704067200
FLUSH_STAMP = "2024-01-01T00:00:00.000Z"


class RecordingShipper:
    """ShipperPort fake that records every call.

    Namespaces listed in ``fail_namespaces`` raise SubmissionError.
    """

    def __init__(self, fail_namespaces: Sequence[str] = ()) -> None:
        self.calls: list[tuple[str, list[MetricRecord]]] = []
        self.attempts: list[str] = []
        self.fail_namespaces = set(fail_namespaces)

    async def put_metric_data(
        self, namespace: str, records: Sequence[MetricRecord]
    ) -> None:
        self.attempts.append(namespace)
        if namespace in self.fail_namespaces:
            raise SubmissionError(namespace, "throttled")
        self.calls.append((namespace, list(records)))

    def by_namespace(self) -> dict[str, list[MetricRecord]]:
        return dict(self.calls)


class StaticCredentials:
    """CredentialProviderPort fake returning fixed credentials or failing."""

    def __init__(self, credentials: Credentials | None = None) -> None:
        self.credentials = credentials
        self.fetches = 0

    async def fetch(self) -> Credentials:
        self.fetches += 1
        if self.credentials is None:
            raise CredentialFetchError("metadata service unreachable")
        return self.credentials


@pytest.fixture
def shipper() -> RecordingShipper:
    return RecordingShipper()


@pytest.fixture
def emitter() -> FlushEmitter:
    return FlushEmitter()


@pytest.fixture
def make_aggregator():
    """Factory fixture building an Aggregator and its registry from options.

    Usage:
        def test_something(make_aggregator):
            aggregator, registry = make_aggregator(namespace="Prod")
    """

    def _make(**options: object) -> tuple[Aggregator, MetricRegistry]:
        config = BackendConfig(**options)  # type: ignore[arg-type]
        registry = MetricRegistry(config)
        return Aggregator(config, registry), registry

    return _make


@pytest.fixture
def shipper_factory(shipper: RecordingShipper):
    """Shipper factory that hands out the shared RecordingShipper.

    The credentials each call received are kept in ``factory.credentials``.
    """

    def _factory(config: BackendConfig, credentials: Credentials | None):
        _factory.credentials.append(credentials)
        return shipper

    _factory.credentials = []
    return _factory
