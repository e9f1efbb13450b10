"""Port interfaces for the backend's external collaborators.

The backend depends only on these protocols. Adapters for CloudWatch and
the EC2 instance metadata service live in ``statsd_cloudwatch.adapters``.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from statsd_cloudwatch.core.models import Credentials, MetricRecord


@runtime_checkable
class ShipperPort(Protocol):
    """Port for submitting a namespace's records to the metrics API."""

    async def put_metric_data(
        self, namespace: str, records: Sequence[MetricRecord]
    ) -> None:
        """Submit one namespace's batch.

        Raises:
            SubmissionError: If the remote call fails.
        """
        ...


@runtime_checkable
class CredentialProviderPort(Protocol):
    """Port for fetching credentials before the backend starts."""

    async def fetch(self) -> Credentials:
        """Fetch credentials.

        Raises:
            CredentialFetchError: If no credentials could be obtained.
        """
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Decides whether a failed submission is attempted again."""

    def next_delay(self, attempt: int, error: Exception) -> float | None:
        """Return seconds to wait before retrying, or None to give up.

        Args:
            attempt: Number of attempts made so far (1 after the first).
            error: The error raised by the last attempt.
        """
        ...
