"""
Unit tests for the ingestion receiver.
"""
import pytest

from deliveries.exceptions import AuthError, NoActiveDestinationsError, NotFoundError
from deliveries.models import WebhookEvent
from deliveries.services.ingestion import IngestionReceiver, normalize_headers
from deliveries.services.store import EventStore


class TestNormalizeHeaders:
    """Tests for normalize_headers function."""

    def test_lowercases_keys(self):
        assert normalize_headers({'Content-Type': 'application/json'}) == {'content-type': 'application/json'}

    def test_joins_multi_value_headers(self):
        assert normalize_headers({'X-Tag': ['a', 'b', 'c']}) == {'x-tag': 'a,b,c'}

    def test_stringifies_values(self):
        assert normalize_headers({'Content-Length': 42}) == {'content-length': '42'}

    def test_empty(self):
        assert normalize_headers(None) == {}
        assert normalize_headers({}) == {}


@pytest.mark.django_db
class TestReceive:
    """Tests for IngestionReceiver.receive."""

    def test_creates_pending_event_and_enqueues(self, make_route, recording_queue, order_payload):
        route = make_route(destinations=(
            ('a', 'https://a.example.com', 0, True),
            ('b', 'https://b.example.com', 1, True),
            ('c', 'https://c.example.com', 2, False),
        ))

        event = IngestionReceiver(recording_queue, EventStore()).receive(
            'orders', 's3cr3t-route-key', order_payload, headers={'User-Agent': 'stripe/1.0'}
        )

        event.refresh_from_db()
        assert event.route_id == route.id
        assert event.status == WebhookEvent.Status.PENDING
        assert event.payload == order_payload
        assert event.headers == {'user-agent': 'stripe/1.0'}
        assert event.destination_count == 2
        assert event.delivered_count == 0
        assert event.attempt_count == 0
        assert recording_queue.jobs == [(str(event.id), 0)]

    def test_unknown_route_not_found(self, make_route, recording_queue):
        make_route()

        with pytest.raises(NotFoundError):
            IngestionReceiver(recording_queue, EventStore()).receive('missing', 's3cr3t-route-key', {})

        assert WebhookEvent.objects.count() == 0
        assert recording_queue.jobs == []

    def test_inactive_route_not_found(self, make_route, recording_queue):
        make_route(is_active=False)

        with pytest.raises(NotFoundError):
            IngestionReceiver(recording_queue, EventStore()).receive('orders', 's3cr3t-route-key', {})

        assert WebhookEvent.objects.count() == 0

    def test_wrong_secret_unauthorized(self, make_route, recording_queue):
        make_route()

        with pytest.raises(AuthError):
            IngestionReceiver(recording_queue, EventStore()).receive('orders', 'wrong', {})

        assert WebhookEvent.objects.count() == 0
        assert recording_queue.jobs == []

    def test_missing_secret_unauthorized(self, make_route, recording_queue):
        make_route()

        with pytest.raises(AuthError):
            IngestionReceiver(recording_queue, EventStore()).receive('orders', None, {})

    def test_no_active_destinations_rejected(self, make_route, recording_queue):
        make_route(destinations=(('off', 'https://off.example.com', 0, False),))

        with pytest.raises(NoActiveDestinationsError) as exc_info:
            IngestionReceiver(recording_queue, EventStore()).receive('orders', 's3cr3t-route-key', {})

        assert exc_info.value.status_code == 400
        assert WebhookEvent.objects.count() == 0
        assert recording_queue.jobs == []
