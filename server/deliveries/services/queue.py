"""
Delivery queue adapter over Celery.
"""
import logging

from kombu.exceptions import OperationalError

from deliveries.exceptions import InfrastructureError
from webhookhub.celery import app

logger = logging.getLogger(__name__)

DELIVER_TASK_NAME = 'deliveries.tasks.deliver_event'


class CeleryDeliveryQueue:
    """
    Enqueues delivery jobs keyed by event id, optionally delayed.

    Jobs are single-shot: all retrying happens in the orchestrator, which
    enqueues a fresh delayed job for the next cycle.
    """

    def __init__(self, celery_app=None):
        self.app = celery_app or app

    def enqueue(self, event_id, delay_ms: int = 0) -> None:
        countdown = max(delay_ms, 0) / 1000
        try:
            self.app.send_task(
                DELIVER_TASK_NAME,
                args=[str(event_id)],
                countdown=countdown or None,
            )
        except OperationalError as e:
            logger.error(f"Could not enqueue delivery for event {event_id}: {e}")
            raise InfrastructureError('Delivery queue unavailable') from e

        logger.info(f"Enqueued delivery for event {event_id} (delay={delay_ms}ms)")


def get_delivery_queue() -> CeleryDeliveryQueue:
    return CeleryDeliveryQueue()
