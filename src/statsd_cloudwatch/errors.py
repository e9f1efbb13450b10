"""Exception hierarchy for the CloudWatch statsd backend."""

from collections.abc import Sequence
from typing import Any


class CloudWatchBackendError(Exception):
    """Base class for all backend errors."""


class ConfigurationError(CloudWatchBackendError):
    """Raised when a backend option has an unusable type or value."""


class CredentialFetchError(CloudWatchBackendError):
    """Raised when IAM role credentials cannot be fetched."""


class SubmissionError(CloudWatchBackendError):
    """Raised when a PutMetricData call fails.

    Attributes:
        namespace: The namespace whose batch was rejected.
        unsent: Records not yet accepted, starting with the rejected chunk,
            or None when the whole batch should be considered unsent.
    """

    def __init__(
        self, namespace: str, message: str, unsent: Sequence[Any] | None = None
    ) -> None:
        super().__init__(f"PutMetricData failed for {namespace}: {message}")
        self.namespace = namespace
        self.unsent = unsent
