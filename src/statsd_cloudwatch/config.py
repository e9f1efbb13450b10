"""Backend configuration parsed from the statsd config block.

statsd hands each backend the whole daemon config as a plain dictionary.
The ``cloudwatch`` block either describes a single instance or carries an
``instances`` list with one entry per region/account.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from statsd_cloudwatch.core.models import Credentials
from statsd_cloudwatch.errors import ConfigurationError

# PutMetricData accepts at most this many entries per call
DEFAULT_MAX_BATCH_SIZE = 1000

_KNOWN_OPTIONS = frozenset(
    {
        "namespace",
        "metricName",
        "processKeyForNamespace",
        "whitelist",
        "iamRole",
        "region",
        "endpoint",
        "accessKeyId",
        "secretAccessKey",
        "sessionToken",
        "maxBatchSize",
        "instances",
    }
)


def _optional_str(options: Mapping[str, Any], name: str) -> str | None:
    value = options.get(name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string, got {type(value).__name__}")
    return value


def _parse_whitelist(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigurationError("whitelist must be a list of metric keys")
    return frozenset(value)


def _parse_batch_size(value: Any) -> int:
    if value is None:
        return DEFAULT_MAX_BATCH_SIZE
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError("maxBatchSize must be a positive integer")
    return value


@dataclass(frozen=True)
class BackendConfig:
    """Options for one backend instance.

    Attributes:
        namespace: Forces every record into this namespace.
        metric_name: Forces every record to this metric name.
        process_key_for_namespace: Derive namespace and name from the key.
        whitelist: When non-empty, only these raw keys are shipped.
        iam_role: Role to fetch credentials for, or "any" for the first one.
        region: AWS region of the CloudWatch endpoint.
        endpoint: Custom endpoint URL (LocalStack, VPC endpoints).
        access_key_id: Static access key id.
        secret_access_key: Static secret access key.
        session_token: Static session token.
        max_batch_size: Largest number of records sent in one call.
        extra: Any other provider options, passed through untouched.
    """

    namespace: str | None = None
    metric_name: str | None = None
    process_key_for_namespace: bool = False
    whitelist: frozenset[str] = frozenset()
    iam_role: str | None = None
    region: str | None = None
    endpoint: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "BackendConfig":
        """Validate a statsd option block (camelCase keys).

        Raises:
            ConfigurationError: If an option has the wrong type.
        """
        return cls(
            namespace=_optional_str(options, "namespace"),
            metric_name=_optional_str(options, "metricName"),
            process_key_for_namespace=bool(options.get("processKeyForNamespace")),
            whitelist=_parse_whitelist(options.get("whitelist")),
            iam_role=_optional_str(options, "iamRole"),
            region=_optional_str(options, "region"),
            endpoint=_optional_str(options, "endpoint"),
            access_key_id=_optional_str(options, "accessKeyId"),
            secret_access_key=_optional_str(options, "secretAccessKey"),
            session_token=_optional_str(options, "sessionToken"),
            max_batch_size=_parse_batch_size(options.get("maxBatchSize")),
            extra={k: v for k, v in options.items() if k not in _KNOWN_OPTIONS},
        )

    def is_whitelisted(self, key: str) -> bool:
        """Return True if the key may be shipped under this config."""
        return not self.whitelist or key in self.whitelist

    def to_boto3_kwargs(self, credentials: Credentials | None = None) -> dict[str, Any]:
        """Build kwargs for ``boto3.client("cloudwatch", ...)``.

        Credentials fetched from the metadata service win over static keys.
        """
        kwargs: dict[str, Any] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint:
            kwargs["endpoint_url"] = self.endpoint
        if credentials is not None:
            kwargs.update(credentials.to_boto3_kwargs())
        else:
            if self.access_key_id:
                kwargs["aws_access_key_id"] = self.access_key_id
            if self.secret_access_key:
                kwargs["aws_secret_access_key"] = self.secret_access_key
            if self.session_token:
                kwargs["aws_session_token"] = self.session_token
        return kwargs


def load_instance_configs(config: Mapping[str, Any] | None) -> list[BackendConfig]:
    """Read one BackendConfig per configured CloudWatch instance.

    Args:
        config: The full statsd configuration dictionary.

    Returns:
        A config per entry of ``cloudwatch.instances``, or a single config
        built from the ``cloudwatch`` block when no list is given.
    """
    cloudwatch = (config or {}).get("cloudwatch") or {}
    if not isinstance(cloudwatch, Mapping):
        raise ConfigurationError("cloudwatch must be a mapping")
    instances = cloudwatch.get("instances")
    if instances is None:
        return [BackendConfig.from_dict(cloudwatch)]
    if not isinstance(instances, list):
        raise ConfigurationError("cloudwatch.instances must be a list")
    return [BackendConfig.from_dict(instance) for instance in instances]
