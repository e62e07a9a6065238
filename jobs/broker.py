"""
Dramatiq broker configuration.

Redis-based message broker for task queue. The test environment uses an
in-process stub broker.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from loguru import logger

from app.config.settings import settings

if settings.environment == "test":
    broker = StubBroker()
    broker.emit_after("process_boot")
    logger.info("Dramatiq stub broker initialized")
else:
    broker = RedisBroker(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password if settings.redis_password else None,
        db=settings.redis_db,
    )
    logger.info(
        f"Dramatiq broker initialized: "
        f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
    )

# Set as default broker
dramatiq.set_broker(broker)
