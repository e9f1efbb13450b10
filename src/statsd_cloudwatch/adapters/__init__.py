"""Adapters implementing the core ports against AWS."""

from statsd_cloudwatch.adapters.cloudwatch import CloudWatchShipper
from statsd_cloudwatch.adapters.credentials import InstanceMetadataCredentials

__all__ = [
    "CloudWatchShipper",
    "InstanceMetadataCredentials",
]
