"""
Celery tasks for async event delivery.
"""
import logging
from celery import shared_task

from deliveries.services.orchestrator import DeliveryOrchestrator
from deliveries.services.queue import DELIVER_TASK_NAME, get_delivery_queue

logger = logging.getLogger(__name__)


@shared_task(
    name=DELIVER_TASK_NAME,
    max_retries=0,  # Retries are scheduled by the orchestrator, not by Celery
    acks_late=True,
    reject_on_worker_lost=True,
    ignore_result=True,
)
def deliver_event(event_id: str):
    """
    Run one delivery cycle for an event.

    Workflow:
    1. Load event, route and destinations
    2. Skip if the event is gone or finished, or its route is inactive
    3. POST to each active destination in priority order
    4. Record one delivery attempt per destination
    5. Update event status (SUCCESS, RETRYING or FAILED)
    6. Enqueue the next cycle with backoff while retries remain

    Store and queue errors are not handled here; they fail the job.

    Args:
        event_id: ID of the WebhookEvent to deliver

    Returns:
        Outcome of the cycle as a dict
    """
    logger.info(f"Delivery job started for event {event_id}")
    try:
        outcome = DeliveryOrchestrator(queue=get_delivery_queue()).run(event_id)
    except Exception as e:
        logger.error(
            f"Delivery job failed for event {event_id}: {e}",
            exc_info=True
        )
        raise

    logger.info(f"Delivery job for event {event_id} finished: {outcome.result}")
    return outcome.as_dict()
