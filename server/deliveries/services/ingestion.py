"""
Ingestion of inbound webhook events.
"""
import hmac
import logging
from typing import Mapping, Optional

from deliveries.exceptions import AuthError, NoActiveDestinationsError, NotFoundError
from deliveries.models import WebhookEvent
from deliveries.services.store import EventStore

logger = logging.getLogger(__name__)


def normalize_headers(headers: Optional[Mapping]) -> dict:
    """
    Flatten request headers to a string map.

    Keys are lowercased; multi-value headers are joined with commas.
    """
    if not headers:
        return {}
    normalized = {}
    for key, value in headers.items():
        if isinstance(value, (list, tuple)):
            value = ','.join(str(item) for item in value)
        normalized[str(key).lower()] = str(value)
    return normalized


def secrets_match(expected: str, provided: Optional[str]) -> bool:
    return hmac.compare_digest((expected or '').encode('utf-8'), (provided or '').encode('utf-8'))


class IngestionReceiver:
    """
    Accepts an inbound event for a route and enqueues its first delivery cycle.
    """

    def __init__(self, queue, store: Optional[EventStore] = None):
        self.queue = queue
        self.store = store or EventStore()

    def receive(self, slug: str, provided_secret: Optional[str], payload,
                headers: Optional[Mapping] = None) -> WebhookEvent:
        """
        Validate the request against the route, persist the event, enqueue it.

        Args:
            slug: Route slug from the inbound URL
            provided_secret: Secret from the header or query string
            payload: Request body, stored as-is
            headers: Full request header set

        Returns:
            The created event (status PENDING)

        Raises:
            NotFoundError: Unknown or inactive route
            AuthError: Secret mismatch
            NoActiveDestinationsError: Route has no active destination
        """
        route = self.store.get_route_by_slug(slug)
        if route is None or not route.is_active:
            raise NotFoundError('Webhook route not found')

        if not secrets_match(route.secret, provided_secret):
            raise AuthError('Invalid secret')

        destinations = self.store.active_destinations(route)
        if not destinations:
            raise NoActiveDestinationsError()

        event = self.store.create_event(
            route,
            payload=payload,
            headers=normalize_headers(headers),
            destination_count=len(destinations),
        )
        logger.info(f"Event {event.id} received on route {route.slug}")

        self.queue.enqueue(event.id, delay_ms=0)
        return event
