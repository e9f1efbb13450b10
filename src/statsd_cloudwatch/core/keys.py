"""Metric key parsing for namespace inference."""

import re
from typing import NamedTuple

_KEY_DELIMITERS = re.compile(r"[./-]")


class ParsedKey(NamedTuple):
    """A metric key split into its leaf name and namespace path."""

    metric_name: str
    namespace: str | None


def parse_key(key: str) -> ParsedKey:
    """Split a statsd key on ``.``, ``/`` and ``-``.

    The last segment becomes the metric name and the remaining segments,
    joined with ``/``, the namespace. A key without delimiters has no
    namespace. Empty segments are kept as they are.

    Args:
        key: Raw statsd metric key (e.g. "api.requests.count").

    Returns:
        ParsedKey, e.g. ParsedKey("count", "api/requests").
    """
    parts = _KEY_DELIMITERS.split(key)
    if len(parts) == 1:
        return ParsedKey(metric_name=key, namespace=None)
    return ParsedKey(metric_name=parts[-1], namespace="/".join(parts[:-1]))
