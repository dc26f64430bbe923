"""
Manual retry of an event, whatever state it is in.
"""
import logging
from typing import Optional

from deliveries.exceptions import NoActiveDestinationsError, NotFoundError
from deliveries.models import WebhookEvent
from deliveries.services.store import EventStore

logger = logging.getLogger(__name__)


class ManualRetryController:
    """Resets an event to PENDING and enqueues a new delivery cycle immediately."""

    def __init__(self, queue, store: Optional[EventStore] = None):
        self.queue = queue
        self.store = store or EventStore()

    def retry(self, event_id) -> WebhookEvent:
        event = self.store.get_event(event_id)
        if event is None:
            raise NotFoundError('Event not found')

        destinations = self.store.active_destinations(event.route)
        if not destinations:
            raise NoActiveDestinationsError('Route has no active destinations')

        previous_status = event.status
        self.store.reset_for_retry(event, destination_count=len(destinations))
        logger.info(f"Event {event.id} reset from {previous_status} to PENDING for manual retry")

        self.queue.enqueue(event.id, delay_ms=0)
        return self.store.get_event(event.id)
