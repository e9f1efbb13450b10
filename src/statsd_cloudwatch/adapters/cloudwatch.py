"""CloudWatch adapter implementing ShipperPort with boto3."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from statsd_cloudwatch.config import DEFAULT_MAX_BATCH_SIZE, BackendConfig
from statsd_cloudwatch.core.models import Credentials, MetricRecord
from statsd_cloudwatch.errors import SubmissionError

logger = logging.getLogger(__name__)


def _client_config(extra: Mapping[str, Any]) -> Config | None:
    """Map pass-through SDK options (maxRetries, httpOptions) onto botocore."""
    options: dict[str, Any] = {}
    if "maxRetries" in extra:
        options["retries"] = {"total_max_attempts": int(extra["maxRetries"]) + 1}
    http_options = extra.get("httpOptions") or {}
    # httpOptions timeouts are milliseconds, botocore wants seconds
    if "timeout" in http_options:
        options["read_timeout"] = http_options["timeout"] / 1000
    if "connectTimeout" in http_options:
        options["connect_timeout"] = http_options["connectTimeout"] / 1000
    return Config(**options) if options else None


def _chunks(
    records: Sequence[MetricRecord], size: int
) -> list[Sequence[MetricRecord]]:
    return [records[i : i + size] for i in range(0, len(records), size)]


class CloudWatchShipper:
    """Submits metric batches with ``PutMetricData``.

    The boto3 client is blocking, so each call runs in a worker thread.
    Batches larger than ``max_batch_size`` are split into several calls.

    Example:
        ```python
        shipper = CloudWatchShipper.from_config(BackendConfig(region="eu-west-1"))
        await shipper.put_metric_data("MyApp", records)
        ```
    """

    def __init__(self, client: Any, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE) -> None:
        self._client = client
        self._max_batch_size = max_batch_size

    @classmethod
    def from_config(
        cls, config: BackendConfig, credentials: Credentials | None = None
    ) -> "CloudWatchShipper":
        """Create a shipper with a boto3 client built from backend options."""
        kwargs = config.to_boto3_kwargs(credentials)
        client_config = _client_config(config.extra)
        if client_config is not None:
            kwargs["config"] = client_config
        client = boto3.client("cloudwatch", **kwargs)
        return cls(client, max_batch_size=config.max_batch_size)

    async def put_metric_data(
        self, namespace: str, records: Sequence[MetricRecord]
    ) -> None:
        """Submit the records of one namespace.

        Raises:
            SubmissionError: If CloudWatch or botocore rejects a call. Its
                ``unsent`` holds the rejected chunk and every chunk after it,
                so chunks already accepted are never sent twice.
        """
        sent = 0
        for chunk in _chunks(records, self._max_batch_size):
            try:
                await asyncio.to_thread(self._put, namespace, chunk)
            except SubmissionError as e:
                e.unsent = list(records[sent:])
                raise
            sent += len(chunk)

    def _put(self, namespace: str, records: Sequence[MetricRecord]) -> dict[str, Any]:
        try:
            response: dict[str, Any] = self._client.put_metric_data(
                Namespace=namespace,
                MetricData=[record.to_dict() for record in records],
            )
        except (ClientError, BotoCoreError) as e:
            raise SubmissionError(namespace, str(e)) from e
        logger.debug(
            "PutMetricData accepted %d records for %s", len(records), namespace
        )
        return response
