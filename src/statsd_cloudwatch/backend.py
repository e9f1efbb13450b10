"""A single CloudWatch backend instance.

Each instance owns its registry, aggregator and shipper. It fetches
credentials once, then subscribes to the emitter's ``flush`` event and
ships one batch per namespace on every flush.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from statsd_cloudwatch.adapters.cloudwatch import CloudWatchShipper
from statsd_cloudwatch.adapters.credentials import InstanceMetadataCredentials
from statsd_cloudwatch.config import BackendConfig
from statsd_cloudwatch.core.aggregator import Aggregator, format_timestamp
from statsd_cloudwatch.core.models import Credentials, MetricRecord, MetricSnapshot
from statsd_cloudwatch.core.ports import CredentialProviderPort, RetryPolicy, ShipperPort
from statsd_cloudwatch.core.registry import MetricRegistry
from statsd_cloudwatch.core.retry import NoRetry
from statsd_cloudwatch.errors import CredentialFetchError, SubmissionError
from statsd_cloudwatch.events import FlushEmitter

logger = logging.getLogger(__name__)

ShipperFactory = Callable[[BackendConfig, Credentials | None], ShipperPort]


class BackendState(Enum):
    UNINITIALIZED = "uninitialized"
    BOOTSTRAPPING = "bootstrapping"
    READY = "ready"
    FAILED = "failed"


class CloudWatchBackend:
    """Aggregates statsd flushes and ships them to CloudWatch.

    Flushes that arrive before the backend is READY are dropped.
    Submissions run as background tasks that ``flush`` does not wait for;
    a failed submission is logged and, unless the retry policy says
    otherwise, dropped.

    Args:
        config: Options for this instance.
        shipper_factory: Builds the shipper once credentials are known.
        credential_provider: Source of credentials; defaults to the
            instance metadata service when ``config.iam_role`` is set.
        retry_policy: Decides whether failed submissions are retried.
    """

    def __init__(
        self,
        config: BackendConfig,
        shipper_factory: ShipperFactory = CloudWatchShipper.from_config,
        credential_provider: CredentialProviderPort | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.registry = MetricRegistry(config)
        self.aggregator = Aggregator(config, self.registry)
        self._shipper_factory = shipper_factory
        if credential_provider is None and config.iam_role:
            credential_provider = InstanceMetadataCredentials(config.iam_role)
        self._credential_provider = credential_provider
        self._retry_policy = retry_policy or NoRetry()
        self._shipper: ShipperPort | None = None
        self._emitter: FlushEmitter | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self.state = BackendState.UNINITIALIZED

    @property
    def pending_submissions(self) -> int:
        return len(self._pending)

    async def start(self, emitter: FlushEmitter) -> None:
        """Fetch credentials, build the shipper and subscribe to flushes.

        A credential failure is logged and the backend continues with the
        default credential chain. If the shipper cannot be built (e.g. no
        region is configured) the error is logged and the backend ends up
        FAILED without subscribing.
        """
        if self.state is not BackendState.UNINITIALIZED:
            raise RuntimeError(f"backend already {self.state.value}")
        self.state = BackendState.BOOTSTRAPPING

        credentials: Credentials | None = None
        if self._credential_provider is not None:
            try:
                credentials = await self._credential_provider.fetch()
            except CredentialFetchError as e:
                logger.warning("Failed to fetch IAM role credentials: %s", e)

        try:
            self._shipper = self._shipper_factory(self.config, credentials)
        except Exception:
            self.state = BackendState.FAILED
            logger.exception(
                "Failed to create CloudWatch client in region %s", self.config.region
            )
            return
        emitter.on("flush", self.flush)
        self._emitter = emitter
        self.state = BackendState.READY
        logger.info("CloudWatch backend ready in region %s", self.config.region)

    def flush(
        self, timestamp: float, metrics: MetricSnapshot | Mapping[str, Any]
    ) -> None:
        """Aggregate a snapshot and submit every populated namespace.

        Args:
            timestamp: Flush time in unix seconds.
            metrics: Snapshot, or the dictionary statsd emits.
        """
        if self.state is not BackendState.READY:
            logger.debug("Dropping flush at %s: backend is %s", timestamp, self.state.value)
            return
        snapshot = (
            metrics
            if isinstance(metrics, MetricSnapshot)
            else MetricSnapshot.from_dict(metrics)
        )
        logger.info("Flushing metrics at %s", format_timestamp(timestamp))
        self.aggregator.flush(timestamp, snapshot)

        for namespace, records in self.registry.drain_all().items():
            logger.info("Flushing %s (%d records)", namespace, len(records))
            self._dispatch(namespace, records)

    def _dispatch(self, namespace: str, records: list[MetricRecord]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._submit(namespace, records))
            return
        task = loop.create_task(self._submit(namespace, records))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _submit(self, namespace: str, records: Sequence[MetricRecord]) -> None:
        if self._shipper is None:
            return
        attempt = 0
        while True:
            attempt += 1
            try:
                await self._shipper.put_metric_data(namespace, records)
                return
            except Exception as e:
                if isinstance(e, SubmissionError) and e.unsent is not None:
                    records = e.unsent
                delay = self._retry_policy.next_delay(attempt, e)
                if delay is None:
                    logger.error(
                        "Dropping %d records for %s after %d attempt(s)",
                        len(records),
                        namespace,
                        attempt,
                        exc_info=e,
                    )
                    return
                logger.warning(
                    "Submission for %s failed, retrying in %.2fs: %s",
                    namespace,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

    async def aclose(self) -> None:
        """Unsubscribe from flushes and wait for in-flight submissions."""
        if self._emitter is not None:
            self._emitter.off("flush", self.flush)
            self._emitter = None
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
