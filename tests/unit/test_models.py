"""Tests for core domain models."""

import pytest

from statsd_cloudwatch.core.models import (
    Credentials,
    MetricRecord,
    MetricSnapshot,
    StatisticValues,
    Unit,
)


class TestMetricRecord:
    """Tests for MetricRecord."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_value_record_renders_wire_shape(self) -> None:
        """Scalar records carry Value and no StatisticValues."""
        record = MetricRecord(
            metric_name="hits", unit=Unit.COUNT, timestamp="t", value=3
        )
        assert record.to_dict() == {
            "MetricName": "hits",
            "Unit": "Count",
            "Timestamp": "t",
            "Value": 3,
        }

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_statistic_record_renders_wire_shape(self) -> None:
        """Timer records carry StatisticValues and no Value."""
        stats = StatisticValues(minimum=1, maximum=5, sum=9, sample_count=3)
        record = MetricRecord(
            metric_name="latency",
            unit=Unit.MILLISECONDS,
            timestamp="t",
            statistic_values=stats,
        )
        data = record.to_dict()
        assert "Value" not in data
        assert data["Unit"] == "Milliseconds"
        assert data["StatisticValues"] == {
            "Minimum": 1,
            "Maximum": 5,
            "Sum": 9,
            "SampleCount": 3,
        }

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_record_requires_exactly_one_payload(self) -> None:
        """Neither or both payloads is rejected."""
        stats = StatisticValues(minimum=1, maximum=1, sum=1, sample_count=1)
        with pytest.raises(ValueError, match="exactly one"):
            MetricRecord(metric_name="x", unit=Unit.NONE, timestamp="t")
        with pytest.raises(ValueError, match="exactly one"):
            MetricRecord(
                metric_name="x",
                unit=Unit.NONE,
                timestamp="t",
                value=1,
                statistic_values=stats,
            )

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_zero_value_is_a_payload(self) -> None:
        """A zero value still counts as the Value payload."""
        record = MetricRecord(metric_name="x", unit=Unit.NONE, timestamp="t", value=0)
        assert record.to_dict()["Value"] == 0


class TestMetricSnapshot:
    """Tests for MetricSnapshot.from_dict()."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_missing_categories_default_to_empty(self) -> None:
        """Absent categories become empty mappings."""
        snapshot = MetricSnapshot.from_dict({"counters": {"a": 1}})
        assert snapshot.counters == {"a": 1}
        assert snapshot.gauges == {}
        assert snapshot.sets == {}
        assert snapshot.timers == {}

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_none_categories_default_to_empty(self) -> None:
        """None categories become empty mappings."""
        snapshot = MetricSnapshot.from_dict({"timers": None})
        assert snapshot.timers == {}


class TestCredentials:
    """Tests for Credentials."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_boto3_kwargs_include_token_when_present(self) -> None:
        """A session token is passed to boto3 when set."""
        creds = Credentials("AKID", "secret", "token")
        assert creds.to_boto3_kwargs() == {
            "aws_access_key_id": "AKID",
            "aws_secret_access_key": "secret",
            "aws_session_token": "token",
        }

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_boto3_kwargs_omit_missing_token(self) -> None:
        """No session token argument without a token."""
        assert "aws_session_token" not in Credentials("AKID", "secret").to_boto3_kwargs()

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_repr_hides_secret(self) -> None:
        """repr() never shows the secret access key."""
        assert "hunter2" not in repr(Credentials("AKID", "hunter2"))
