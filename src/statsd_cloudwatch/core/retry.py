"""Retry policies for metric submission.

Submissions are fire-and-forget: by default a failed batch is logged and
dropped. ``BackoffRetry`` is available for deployments that prefer to
try again before giving up.
"""

from dataclasses import dataclass


class NoRetry:
    """Never retry; the failed batch is dropped."""

    def next_delay(self, attempt: int, error: Exception) -> float | None:
        return None


@dataclass(frozen=True)
class BackoffRetry:
    """Retry with exponential backoff up to a fixed number of attempts.

    Attributes:
        max_attempts: Total attempts including the first one.
        base_delay: Delay in seconds before the first retry.
        multiplier: Factor applied to the delay after each retry.
        max_delay: Upper bound for a single delay.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def next_delay(self, attempt: int, error: Exception) -> float | None:
        if attempt >= self.max_attempts:
            return None
        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)
