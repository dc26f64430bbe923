"""
Delivery orchestrator: runs one delivery cycle for an event.

A cycle fans the event out to the route's active destinations one at a time
in priority order, records one attempt per destination, derives the event's
next status and, while retries remain, schedules the next cycle on the
delivery queue with exponential backoff.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from django.conf import settings

from deliveries.exceptions import DeliveryHTTPError, DeliveryTransportError
from deliveries.models import WebhookEvent
from deliveries.services.destination_client import DestinationClient
from deliveries.services.retry_policy import backoff_delay_ms, next_status
from deliveries.services.store import EventStore, order_for_delivery

logger = logging.getLogger(__name__)

NO_ACTIVE_DESTINATIONS_MESSAGE = 'Route has no active destinations'


@dataclass
class DeliveryOutcome:
    """How a delivery job ended."""

    SKIPPED = 'skipped'
    DELIVERED = 'delivered'
    RETRY_SCHEDULED = 'retry_scheduled'
    FAILED = 'failed'
    STALE = 'stale'

    event_id: str
    result: str
    status: Optional[str] = None
    delivered_count: int = 0
    destination_count: int = 0
    delay_ms: Optional[int] = None
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


def truncate_body(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    limit = getattr(settings, 'MAX_RESPONSE_BODY_LENGTH', 5000)
    return text[:limit]


def is_ok_status(status_code: int) -> bool:
    return 200 <= status_code < 300


class DeliveryOrchestrator:
    """
    Runs delivery cycles against an explicit store, queue and HTTP client.

    Args:
        queue: Object with `enqueue(event_id, delay_ms=0)`
        store: EventStore (or compatible)
        client: DestinationClient (or compatible)
    """

    def __init__(self, queue, store: Optional[EventStore] = None,
                 client: Optional[DestinationClient] = None):
        self.queue = queue
        self.store = store or EventStore()
        self.client = client or DestinationClient()

    def run(self, event_id) -> DeliveryOutcome:
        event_id = str(event_id)
        event, destinations = self.store.load_for_delivery(event_id)

        if event is None:
            logger.warning(f"Event {event_id} not found, delivery job skipped")
            return DeliveryOutcome(event_id, DeliveryOutcome.SKIPPED, reason='event_not_found')

        route = event.route
        if not route.is_active:
            logger.warning(f"Route {route.slug} is inactive, delivery of event {event_id} skipped")
            return DeliveryOutcome(
                event_id, DeliveryOutcome.SKIPPED, status=event.status, reason='route_inactive'
            )

        # Only a manual retry moves a terminal event back to PENDING
        if event.is_terminal:
            logger.warning(f"Event {event_id} is already {event.status}, delivery job skipped")
            return DeliveryOutcome(
                event_id, DeliveryOutcome.SKIPPED, status=event.status, reason='event_terminal'
            )

        loaded_version = event.version
        active = order_for_delivery(destinations)

        if not active:
            written = self.store.mark_failed(
                event, expected_version=loaded_version, error_message=NO_ACTIVE_DESTINATIONS_MESSAGE
            )
            if not written:
                return self._stale(event_id)
            logger.error(f"Event {event_id} FAILED: {NO_ACTIVE_DESTINATIONS_MESSAGE}")
            return DeliveryOutcome(
                event_id, DeliveryOutcome.FAILED,
                status=WebhookEvent.Status.FAILED,
                reason=NO_ACTIVE_DESTINATIONS_MESSAGE,
            )

        logger.info(
            f"Delivering event {event_id} to {len(active)} destination(s), "
            f"cycle {event.attempt_count + 1}/{route.max_retries}"
        )

        delivered_count = 0
        last_error = None
        for destination in active:
            try:
                self._deliver_to(event, destination)
                delivered_count += 1
            except (DeliveryHTTPError, DeliveryTransportError) as e:
                last_error = str(e)

        attempt_count = event.attempt_count + 1
        delivered_all = delivered_count == len(active)
        status = next_status(delivered_all, attempt_count, route.max_retries)

        written = self.store.save_cycle(
            event,
            expected_version=loaded_version,
            status=status,
            attempt_count=attempt_count,
            destination_count=len(active),
            delivered_count=delivered_count,
            error_message=None if delivered_all else last_error,
        )
        if not written:
            return self._stale(event_id)

        outcome = DeliveryOutcome(
            event_id,
            DeliveryOutcome.DELIVERED,
            status=status,
            delivered_count=delivered_count,
            destination_count=len(active),
        )

        if status == WebhookEvent.Status.SUCCESS:
            logger.info(f"Event {event_id} SUCCESS: delivered to {delivered_count}/{len(active)}")
        elif status == WebhookEvent.Status.FAILED:
            outcome.result = DeliveryOutcome.FAILED
            outcome.reason = last_error
            logger.error(
                f"Event {event_id} FAILED after {attempt_count} cycle(s): "
                f"delivered {delivered_count}/{len(active)}, last error: {last_error}"
            )
        else:
            delay_ms = backoff_delay_ms(attempt_count)
            self.queue.enqueue(event_id, delay_ms=delay_ms)
            outcome.result = DeliveryOutcome.RETRY_SCHEDULED
            outcome.delay_ms = delay_ms
            outcome.reason = last_error
            logger.warning(
                f"Event {event_id} RETRYING: delivered {delivered_count}/{len(active)}, "
                f"next cycle in {delay_ms}ms (attempt {attempt_count}/{route.max_retries})"
            )

        return outcome

    def _deliver_to(self, event: WebhookEvent, destination) -> None:
        """
        Deliver to one destination and record the attempt.

        Raises:
            DeliveryHTTPError: Destination answered with a non-ok status
            DeliveryTransportError: Destination could not be reached
        """
        route = event.route
        try:
            response = self.client.send(
                destination.endpoint,
                event_id=str(event.id),
                route_slug=route.slug,
                project_name=route.project.name,
                secret=route.secret,
                payload=event.payload,
            )
        except DeliveryTransportError as e:
            self.store.record_attempt(
                event, destination, success=False, error_message=str(e)
            )
            logger.warning(f"Event {event.id}: destination {destination.label} unreachable: {e}")
            raise

        success = is_ok_status(response.status_code)
        error = None if success else DeliveryHTTPError(response.status_code)
        self.store.record_attempt(
            event,
            destination,
            success=success,
            response_status=response.status_code,
            response_body=truncate_body(response.text),
            error_message=None if success else str(error),
        )

        if error is not None:
            logger.warning(f"Event {event.id}: destination {destination.label} answered {response.status_code}")
            raise error

    def _stale(self, event_id: str) -> DeliveryOutcome:
        logger.warning(
            f"Event {event_id} was modified during its delivery cycle, "
            f"cycle result discarded"
        )
        return DeliveryOutcome(event_id, DeliveryOutcome.STALE, reason='stale_version')
