"""
Unit tests for the Celery delivery queue adapter.
"""
from unittest.mock import Mock

import pytest
from kombu.exceptions import OperationalError

from deliveries.exceptions import InfrastructureError
from deliveries.services.queue import DELIVER_TASK_NAME, CeleryDeliveryQueue


class TestCeleryDeliveryQueue:
    """Tests for CeleryDeliveryQueue.enqueue."""

    def test_immediate_job(self):
        app = Mock()

        CeleryDeliveryQueue(app).enqueue('event-1')

        app.send_task.assert_called_once_with(DELIVER_TASK_NAME, args=['event-1'], countdown=None)

    def test_delayed_job_uses_seconds_countdown(self):
        app = Mock()

        CeleryDeliveryQueue(app).enqueue('event-1', delay_ms=2000)

        app.send_task.assert_called_once_with(DELIVER_TASK_NAME, args=['event-1'], countdown=2.0)

    def test_event_id_sent_as_string(self):
        import uuid
        app = Mock()
        event_id = uuid.uuid4()

        CeleryDeliveryQueue(app).enqueue(event_id)

        assert app.send_task.call_args.kwargs['args'] == [str(event_id)]

    def test_broker_unavailable(self):
        app = Mock()
        app.send_task.side_effect = OperationalError('Error 111 connecting to localhost:6379')

        with pytest.raises(InfrastructureError):
            CeleryDeliveryQueue(app).enqueue('event-1')
