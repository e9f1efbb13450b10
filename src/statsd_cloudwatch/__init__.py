"""statsd backend that ships aggregated metrics to Amazon CloudWatch."""

from statsd_cloudwatch.backend import BackendState, CloudWatchBackend
from statsd_cloudwatch.config import BackendConfig, load_instance_configs
from statsd_cloudwatch.core.aggregator import Aggregator
from statsd_cloudwatch.core.keys import ParsedKey, parse_key
from statsd_cloudwatch.core.models import (
    Credentials,
    MetricRecord,
    MetricSnapshot,
    StatisticValues,
    Unit,
)
from statsd_cloudwatch.core.registry import DEFAULT_NAMESPACE, MetricRegistry
from statsd_cloudwatch.core.retry import BackoffRetry, NoRetry
from statsd_cloudwatch.errors import (
    CloudWatchBackendError,
    ConfigurationError,
    CredentialFetchError,
    SubmissionError,
)
from statsd_cloudwatch.events import FlushEmitter
from statsd_cloudwatch.instances import InstanceManager, init

__all__ = [
    "DEFAULT_NAMESPACE",
    "Aggregator",
    "BackendConfig",
    "BackendState",
    "BackoffRetry",
    "CloudWatchBackend",
    "CloudWatchBackendError",
    "ConfigurationError",
    "CredentialFetchError",
    "Credentials",
    "FlushEmitter",
    "InstanceManager",
    "MetricRecord",
    "MetricRegistry",
    "MetricSnapshot",
    "NoRetry",
    "ParsedKey",
    "StatisticValues",
    "SubmissionError",
    "Unit",
    "init",
    "load_instance_configs",
    "parse_key",
]
