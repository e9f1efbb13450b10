"""Core domain models for metric snapshots and CloudWatch records."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Unit(str, Enum):
    """CloudWatch units emitted by the backend."""

    COUNT = "Count"
    NONE = "None"
    MILLISECONDS = "Milliseconds"


@dataclass(frozen=True)
class StatisticValues:
    """Pre-aggregated statistics for a timer.

    Attributes:
        minimum: Smallest sample.
        maximum: Largest sample.
        sum: Sum of all samples.
        sample_count: Number of samples.
    """

    minimum: float
    maximum: float
    sum: float
    sample_count: int

    def to_dict(self) -> dict[str, float]:
        return {
            "Minimum": self.minimum,
            "Maximum": self.maximum,
            "Sum": self.sum,
            "SampleCount": self.sample_count,
        }


@dataclass(frozen=True)
class MetricRecord:
    """A single entry of a PutMetricData batch.

    Exactly one of ``value`` and ``statistic_values`` is set. A ``None``
    value (an undefined statsd value) therefore cannot form a record; the
    aggregator logs and skips that key so the rest of the batch stays
    valid for PutMetricData. NaN and other numbers pass through unchecked.

    Attributes:
        metric_name: CloudWatch metric name.
        unit: Unit of the value.
        timestamp: ISO-8601 timestamp shared by the whole flush.
        value: Scalar value for counters, gauges and sets.
        statistic_values: Summary statistics for timers.
    """

    metric_name: str
    unit: Unit
    timestamp: str
    value: float | None = None
    statistic_values: StatisticValues | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.statistic_values is None):
            raise ValueError(
                "MetricRecord needs exactly one of value or statistic_values"
            )

    def to_dict(self) -> dict[str, Any]:
        """Render the record in the shape PutMetricData expects."""
        data: dict[str, Any] = {
            "MetricName": self.metric_name,
            "Unit": self.unit.value,
            "Timestamp": self.timestamp,
        }
        if self.statistic_values is not None:
            data["StatisticValues"] = self.statistic_values.to_dict()
        else:
            data["Value"] = self.value
        return data


@dataclass(frozen=True)
class MetricSnapshot:
    """Metrics handed to the backend on one flush.

    Attributes:
        counters: Counter key to accumulated value.
        gauges: Gauge key to last value.
        sets: Set key to the members seen during the interval.
        timers: Timer key to the samples recorded during the interval.
    """

    counters: Mapping[str, float] = field(default_factory=dict)
    gauges: Mapping[str, float] = field(default_factory=dict)
    sets: Mapping[str, Iterable[Any]] = field(default_factory=dict)
    timers: Mapping[str, Sequence[float]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, metrics: Mapping[str, Any]) -> "MetricSnapshot":
        """Build a snapshot from the dictionary shape statsd flushes."""
        return cls(
            counters=metrics.get("counters") or {},
            gauges=metrics.get("gauges") or {},
            sets=metrics.get("sets") or {},
            timers=metrics.get("timers") or {},
        )


@dataclass(frozen=True)
class Credentials:
    """Static AWS credentials obtained from the instance metadata service."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    def to_boto3_kwargs(self) -> dict[str, str]:
        kwargs = {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
        }
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        return kwargs

    def __repr__(self) -> str:
        return f"Credentials(access_key_id={self.access_key_id!r}, secret_access_key='***')"
