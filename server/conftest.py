import os
import sys
from unittest.mock import Mock

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'webhookhub.settings_test')


class RecordingQueue:
    """Delivery queue double that records (event_id, delay_ms) instead of enqueueing."""

    def __init__(self):
        self.jobs = []

    def enqueue(self, event_id, delay_ms=0):
        self.jobs.append((str(event_id), delay_ms))


def make_response(status_code=200, text='{"ok": true}'):
    """Return a stand-in for an httpx response."""
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def recording_queue():
    return RecordingQueue()


@pytest.fixture
def project(db):
    from deliveries.models import Project
    return Project.objects.create(name='Acme Payments', description='Payment events')


@pytest.fixture
def make_route(project):
    """Create a route with destinations given as (label, endpoint, priority, is_active) tuples."""
    from deliveries.models import WebhookDestination, WebhookRoute

    def _make_route(slug='orders', secret='s3cr3t-route-key', max_retries=3, is_active=True,
                    destinations=(('primary', 'https://hooks.example.com/a', 0, True),)):
        route = WebhookRoute.objects.create(
            project=project,
            name=f"{slug} route",
            slug=slug,
            secret=secret,
            max_retries=max_retries,
            is_active=is_active,
        )
        for label, endpoint, priority, active in destinations:
            WebhookDestination.objects.create(
                route=route,
                label=label,
                endpoint=endpoint,
                priority=priority,
                is_active=active,
            )
        return route

    return _make_route


@pytest.fixture
def make_event():
    from deliveries.models import WebhookEvent

    def _make_event(route, payload=None, **fields):
        fields.setdefault('destination_count', route.destinations.filter(is_active=True).count())
        return WebhookEvent.objects.create(
            route=route,
            payload=payload if payload is not None else {'order_id': 42, 'total': '19.90'},
            headers={'content-type': 'application/json'},
            **fields
        )

    return _make_event


@pytest.fixture
def order_payload():
    """Return a realistic inbound payload for testing."""
    return {
        'type': 'order.paid',
        'order': {
            'id': 'ord_9281',
            'amount': 1990,
            'currency': 'EUR',
            'customer': {'email': 'jane@example.com', 'name': 'Jäne Döe'},
        },
        'items': [
            {'sku': 'SKU-1', 'qty': 2},
            {'sku': 'SKU-7', 'qty': 1},
        ],
        'created_at': 1751013978,
    }


@pytest.fixture
def response_factory():
    return make_response
