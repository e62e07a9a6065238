"""
Dramatiq worker entry point.

Run: dramatiq jobs.worker -p 2 -t 4
"""

from loguru import logger

from app.config.logging import setup_logging

setup_logging(log_file="logs/worker.log")

# Registers the broker, then the actors on it
from jobs.broker import broker  # noqa: E402, F401
from jobs.tasks import referral_stats  # noqa: E402, F401

logger.info(
    f"Dramatiq worker ready: {sorted(broker.get_declared_actors())}"
)
