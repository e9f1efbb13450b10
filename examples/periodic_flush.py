"""Periodic flush loop feeding the backend, pointed at LocalStack.

Run LocalStack, then:

    python examples/periodic_flush.py
"""

import asyncio
import logging
import random
import time

from statsd_cloudwatch import FlushEmitter, InstanceManager

logger = logging.getLogger(__name__)

CONFIG = {
    "cloudwatch": {
        "region": "us-east-1",
        "endpoint": "http://localhost:4566",
        "accessKeyId": "test",
        "secretAccessKey": "test",
        "processKeyForNamespace": True,
    }
}


def collect_snapshot() -> dict[str, dict]:
    """Fake one interval of statsd metrics."""
    return {
        "counters": {"example.requests": random.randint(0, 50)},
        "gauges": {"example.queue-depth": random.random() * 10},
        "sets": {"example.users": {f"user-{random.randint(0, 5)}" for _ in range(10)}},
        "timers": {"example.latency": [random.uniform(5, 120) for _ in range(20)]},
    }


async def main(interval: float = 10.0, flushes: int = 3) -> None:
    emitter = FlushEmitter()
    manager = InstanceManager.from_config(CONFIG)
    await manager.start(emitter)

    for _ in range(flushes):
        emitter.emit("flush", time.time(), collect_snapshot())
        await asyncio.sleep(interval)

    await manager.aclose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
