"""
Persistence operations used by ingestion, delivery and manual retry.

All database access of the delivery core goes through EventStore so the
core receives its store as an explicit collaborator.
"""
import logging
import uuid
from functools import wraps
from typing import List, Optional

from django.db import DatabaseError
from django.db.models import F
from django.utils import timezone

from deliveries.exceptions import InfrastructureError
from deliveries.models import (
    DeliveryAttempt,
    WebhookDestination,
    WebhookEvent,
    WebhookRoute,
)

logger = logging.getLogger(__name__)


def _db_errors_as_infrastructure(method):
    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except DatabaseError as e:
            logger.error(f"Store operation {method.__name__} failed: {e}")
            raise InfrastructureError('Store unavailable') from e
    return wrapper


def order_for_delivery(destinations) -> List[WebhookDestination]:
    """
    Active destinations sorted by ascending priority.

    The sort is stable, so equal priorities keep their stored order.
    """
    active = [destination for destination in destinations if destination.is_active]
    return sorted(active, key=lambda destination: destination.priority)


class EventStore:
    """Django ORM implementation of the delivery core's store."""

    @_db_errors_as_infrastructure
    def get_route_by_slug(self, slug: str) -> Optional[WebhookRoute]:
        return WebhookRoute.objects.select_related('project').filter(slug=slug).first()

    @_db_errors_as_infrastructure
    def active_destinations(self, route: WebhookRoute) -> List[WebhookDestination]:
        return list(route.destinations.filter(is_active=True).order_by('id'))

    @_db_errors_as_infrastructure
    def create_event(self, route: WebhookRoute, payload, headers: dict,
                     destination_count: int) -> WebhookEvent:
        return WebhookEvent.objects.create(
            route=route,
            payload=payload,
            headers=headers,
            status=WebhookEvent.Status.PENDING,
            attempt_count=0,
            destination_count=destination_count,
            delivered_count=0,
        )

    @_db_errors_as_infrastructure
    def get_event(self, event_id) -> Optional[WebhookEvent]:
        try:
            event_id = uuid.UUID(str(event_id))
        except ValueError:
            return None
        return WebhookEvent.objects.select_related('route', 'route__project').filter(pk=event_id).first()

    @_db_errors_as_infrastructure
    def load_for_delivery(self, event_id):
        """
        Load an event with its route and the route's full destination list.

        Returns:
            Tuple of (event, destinations), or (None, []) if the event is gone
        """
        event = self.get_event(event_id)
        if event is None:
            return None, []
        destinations = list(event.route.destinations.order_by('id'))
        return event, destinations

    @_db_errors_as_infrastructure
    def record_attempt(self, event: WebhookEvent, destination: WebhookDestination, *,
                       success: bool, response_status: Optional[int] = None,
                       response_body: Optional[str] = None,
                       error_message: Optional[str] = None) -> DeliveryAttempt:
        return DeliveryAttempt.objects.create(
            event=event,
            destination=destination,
            target_endpoint=destination.endpoint,
            response_status=response_status,
            response_body=response_body,
            success=success,
            error_message=error_message,
        )

    @_db_errors_as_infrastructure
    def save_cycle(self, event: WebhookEvent, *, expected_version: int, status: str,
                   attempt_count: int, destination_count: int, delivered_count: int,
                   error_message: Optional[str]) -> bool:
        """
        Write the outcome of a delivery cycle if nobody wrote the event since it was loaded.

        Returns:
            True if the row was updated, False if the write was stale
        """
        now = timezone.now()
        updated = WebhookEvent.objects.filter(pk=event.pk, version=expected_version).update(
            status=status,
            attempt_count=attempt_count,
            last_attempt_at=now,
            destination_count=destination_count,
            delivered_count=delivered_count,
            error_message=error_message,
            version=F('version') + 1,
            updated_at=now,
        )
        return updated == 1

    @_db_errors_as_infrastructure
    def mark_failed(self, event: WebhookEvent, *, expected_version: int, error_message: str) -> bool:
        updated = WebhookEvent.objects.filter(pk=event.pk, version=expected_version).update(
            status=WebhookEvent.Status.FAILED,
            error_message=error_message,
            version=F('version') + 1,
            updated_at=timezone.now(),
        )
        return updated == 1

    @_db_errors_as_infrastructure
    def reset_for_retry(self, event: WebhookEvent, destination_count: int) -> None:
        """Put an event back to its initial state; always wins over cycles in flight."""
        WebhookEvent.objects.filter(pk=event.pk).update(
            status=WebhookEvent.Status.PENDING,
            attempt_count=0,
            delivered_count=0,
            error_message=None,
            destination_count=destination_count,
            version=F('version') + 1,
            updated_at=timezone.now(),
        )
