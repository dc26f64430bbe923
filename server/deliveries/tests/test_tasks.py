"""
Unit tests for Celery tasks.
"""
import uuid
from unittest.mock import patch

import pytest

from deliveries.exceptions import InfrastructureError
from deliveries.models import WebhookEvent
from deliveries.services.store import EventStore
from deliveries.tasks import deliver_event


@pytest.mark.django_db
class TestDeliverEvent:
    """Tests for the deliver_event task."""

    @patch('deliveries.services.destination_client.httpx.post')
    @patch('deliveries.tasks.get_delivery_queue')
    def test_runs_one_cycle(self, mock_get_queue, mock_post, make_route, make_event, recording_queue,
                            response_factory):
        """Test a successful cycle: PENDING → SUCCESS."""
        mock_get_queue.return_value = recording_queue
        mock_post.return_value = response_factory(200, '{"ok": true}')
        event = make_event(make_route())

        result = deliver_event(str(event.id))

        event.refresh_from_db()
        assert result['result'] == 'delivered'
        assert result['status'] == WebhookEvent.Status.SUCCESS
        assert result['event_id'] == str(event.id)
        assert event.status == WebhookEvent.Status.SUCCESS
        assert event.attempts.count() == 1
        assert recording_queue.jobs == []

    @patch('deliveries.services.destination_client.httpx.post')
    @patch('deliveries.tasks.get_delivery_queue')
    def test_failed_cycle_schedules_next_job(self, mock_get_queue, mock_post, make_route, make_event,
                                             recording_queue, response_factory):
        mock_get_queue.return_value = recording_queue
        mock_post.return_value = response_factory(500, 'error')
        event = make_event(make_route(max_retries=3))

        result = deliver_event(str(event.id))

        assert result['result'] == 'retry_scheduled'
        assert result['delay_ms'] == 2000
        assert recording_queue.jobs == [(str(event.id), 2000)]

    @patch('deliveries.tasks.get_delivery_queue')
    def test_missing_event_reports_skipped(self, mock_get_queue, recording_queue):
        mock_get_queue.return_value = recording_queue

        result = deliver_event(str(uuid.uuid4()))

        assert result['result'] == 'skipped'
        assert result['reason'] == 'event_not_found'

    @patch('deliveries.tasks.get_delivery_queue')
    def test_inactive_route_reports_skipped(self, mock_get_queue, make_route, make_event, recording_queue):
        mock_get_queue.return_value = recording_queue
        event = make_event(make_route(is_active=False))

        result = deliver_event(str(event.id))

        assert result['result'] == 'skipped'
        assert result['reason'] == 'route_inactive'

    @patch('deliveries.tasks.get_delivery_queue')
    def test_infrastructure_error_fails_the_job(self, mock_get_queue, recording_queue):
        mock_get_queue.return_value = recording_queue

        with patch.object(EventStore, 'load_for_delivery', side_effect=InfrastructureError('Store unavailable')):
            with pytest.raises(InfrastructureError):
                deliver_event(str(uuid.uuid4()))

    def test_task_is_single_shot(self):
        assert deliver_event.name == 'deliveries.tasks.deliver_event'
        assert deliver_event.max_retries == 0
        assert deliver_event.ignore_result is True
