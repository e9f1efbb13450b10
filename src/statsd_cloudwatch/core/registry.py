"""Per-namespace buffering of metric records between flushes."""

from dataclasses import replace

from statsd_cloudwatch.config import BackendConfig
from statsd_cloudwatch.core.keys import parse_key
from statsd_cloudwatch.core.models import MetricRecord

DEFAULT_NAMESPACE = "AwsCloudWatchStatsdBackend"


class MetricRegistry:
    """Accumulates records per namespace until they are drained.

    Namespace and metric name are resolved from the backend config first,
    then from the parsed key when ``process_key_for_namespace`` is set,
    and finally fall back to ``DEFAULT_NAMESPACE`` and the raw key.
    """

    def __init__(self, config: BackendConfig) -> None:
        self._config = config
        self._buckets: dict[str, list[MetricRecord]] = {}

    def register(self, key: str, record: MetricRecord) -> MetricRecord:
        """Name a record after its key and append it to its namespace.

        Args:
            key: Raw statsd key the record was built from.
            record: Record to store; its metric name is replaced.

        Returns:
            The stored record carrying the resolved metric name.
        """
        parsed_name = parsed_namespace = None
        if self._config.process_key_for_namespace:
            parsed_name, parsed_namespace = parse_key(key)

        namespace = self._config.namespace or parsed_namespace or DEFAULT_NAMESPACE
        metric_name = self._config.metric_name or parsed_name or key

        named = replace(record, metric_name=metric_name)
        self._buckets.setdefault(namespace, []).append(named)
        return named

    def drain_all(self) -> dict[str, list[MetricRecord]]:
        """Return every populated bucket, removing each one as it is read."""
        drained: dict[str, list[MetricRecord]] = {}
        for namespace in list(self._buckets):
            drained[namespace] = self._buckets.pop(namespace)
        return drained

    def namespaces(self) -> list[str]:
        """Namespaces that currently hold records, in insertion order."""
        return list(self._buckets)

    def __len__(self) -> int:
        return sum(len(records) for records in self._buckets.values())
