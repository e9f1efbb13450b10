"""Conversion of statsd snapshots into CloudWatch metric records."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from statsd_cloudwatch.config import BackendConfig
from statsd_cloudwatch.core.models import (
    MetricRecord,
    MetricSnapshot,
    StatisticValues,
    Unit,
)
from statsd_cloudwatch.core.registry import MetricRegistry

logger = logging.getLogger(__name__)

ValueTransform = Callable[[Any, str], float]


def format_timestamp(timestamp: float) -> str:
    """Format unix seconds as ISO-8601 UTC with millisecond precision.

    Example:
        >>> format_timestamp(0)
        '1970-01-01T00:00:00.000Z'
    """
    moment = datetime.fromtimestamp(timestamp, tz=UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def set_cardinality(members: Iterable[Any], key: str) -> int:
    """Count the distinct members of a statsd set."""
    return len(set(members))


def summarize_timer(samples: Sequence[float]) -> StatisticValues:
    """Compute min, max, sum and count of timer samples in one pass.

    Values are compared pairwise and summed left to right, so NaN and
    floating point rounding behave as plain arithmetic would.

    Args:
        samples: Non-empty sequence of timings in milliseconds.
    """
    iterator = iter(samples)
    first = next(iterator)
    minimum = maximum = total = first
    count = 1
    for sample in iterator:
        if sample < minimum:
            minimum = sample
        if sample > maximum:
            maximum = sample
        total = total + sample
        count += 1
    return StatisticValues(minimum=minimum, maximum=maximum, sum=total, sample_count=count)


class Aggregator:
    """Turns a flush snapshot into records held by a MetricRegistry.

    Categories are processed in a fixed order: counters, gauges, sets,
    timers. Keys outside a non-empty whitelist are skipped, and a failure
    on one key is logged without stopping the rest of the flush.
    """

    def __init__(self, config: BackendConfig, registry: MetricRegistry) -> None:
        self._config = config
        self._registry = registry

    def flush(self, timestamp: float, snapshot: MetricSnapshot) -> None:
        """Register records for every metric in the snapshot.

        Args:
            timestamp: Flush time in unix seconds.
            snapshot: Metrics collected during the interval.
        """
        stamp = format_timestamp(timestamp)
        self._prepare_metrics(stamp, snapshot.counters, Unit.COUNT)
        self._prepare_metrics(stamp, snapshot.gauges, Unit.NONE)
        self._prepare_metrics(stamp, snapshot.sets, Unit.NONE, set_cardinality)
        self._prepare_stat_metrics(stamp, snapshot.timers)

    def _skip(self, key: str) -> bool:
        if self._config.is_whitelisted(key):
            return False
        logger.debug('Key "%s" not in whitelist', key)
        return True

    def _prepare_metrics(
        self,
        stamp: str,
        metrics: Mapping[str, Any],
        unit: Unit,
        transform: ValueTransform | None = None,
    ) -> None:
        for key, raw in metrics.items():
            if self._skip(key):
                continue
            try:
                value = transform(raw, key) if transform else raw
                record = MetricRecord(
                    metric_name=key, unit=unit, timestamp=stamp, value=value
                )
                self._registry.register(key, record)
            except Exception:
                logger.exception('Failed to prepare %s metric "%s"', unit.value, key)

    def _prepare_stat_metrics(
        self, stamp: str, timers: Mapping[str, Sequence[float]]
    ) -> None:
        for key, samples in timers.items():
            if not samples:
                continue
            if self._skip(key):
                continue
            try:
                record = MetricRecord(
                    metric_name=key,
                    unit=Unit.MILLISECONDS,
                    timestamp=stamp,
                    statistic_values=summarize_timer(samples),
                )
                self._registry.register(key, record)
            except Exception:
                logger.exception('Failed to summarize timer "%s"', key)
