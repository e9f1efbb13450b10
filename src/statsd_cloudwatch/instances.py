"""Construction of one backend per configured CloudWatch instance."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from statsd_cloudwatch.backend import CloudWatchBackend
from statsd_cloudwatch.config import BackendConfig, load_instance_configs
from statsd_cloudwatch.events import FlushEmitter

logger = logging.getLogger(__name__)

BackendFactory = Callable[[BackendConfig], CloudWatchBackend]


class InstanceManager:
    """Owns the independent backends declared in a statsd config.

    Backends share nothing; each subscribes to the emitter on its own once
    its credentials are settled.
    """

    def __init__(self, backends: list[CloudWatchBackend]) -> None:
        self.backends = backends
        self.start_task: asyncio.Task[None] | None = None

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None,
        backend_factory: BackendFactory = CloudWatchBackend,
    ) -> "InstanceManager":
        """Build a backend for each entry of ``cloudwatch.instances``.

        Raises:
            ConfigurationError: If an instance block is invalid.
        """
        backends = []
        for instance_config in load_instance_configs(config):
            logger.info(
                "Starting cloudwatch reporter instance in region %s",
                instance_config.region,
            )
            backends.append(backend_factory(instance_config))
        return cls(backends)

    async def start(self, emitter: FlushEmitter) -> None:
        """Bootstrap every backend concurrently and subscribe it to flushes.

        A backend that fails to start is logged; the others still start.
        """
        results = await asyncio.gather(
            *(backend.start(emitter) for backend in self.backends),
            return_exceptions=True,
        )
        for backend, result in zip(self.backends, results):
            if isinstance(result, Exception):
                logger.error(
                    "CloudWatch instance in region %s failed to start",
                    backend.config.region,
                    exc_info=result,
                )

    async def aclose(self) -> None:
        """Stop every backend and wait for in-flight submissions."""
        if self.start_task is not None:
            await self.start_task
        await asyncio.gather(*(backend.aclose() for backend in self.backends))


def init(
    startup_time: float,
    config: Mapping[str, Any] | None,
    emitter: FlushEmitter,
    backend_factory: BackendFactory = CloudWatchBackend,
) -> InstanceManager:
    """Backend entry point called by the statsd daemon.

    Backends are started in the background when an event loop is running,
    so flushes emitted before their credentials arrive are not received.
    Without a running loop they are started before returning.

    Args:
        startup_time: Daemon start time in unix seconds.
        config: The full statsd configuration.
        emitter: Event emitter that publishes ``flush`` events.
        backend_factory: Builds a backend from an instance config.

    Returns:
        The manager owning the started (or starting) backends.
    """
    logger.debug("Initializing CloudWatch backend, daemon started at %s", startup_time)
    manager = InstanceManager.from_config(config, backend_factory)
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(manager.start(emitter))
        return manager
    manager.start_task = loop.create_task(manager.start(emitter))
    return manager
