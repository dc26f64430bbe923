"""
Tests for backoff and status derivation.
"""
import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from deliveries.models import WebhookEvent
from deliveries.services.retry_policy import backoff_delay_ms, next_status


class TestBackoffDelay:
    """delay(k) = min(2^k * 1000, 60000)."""

    @pytest.mark.parametrize('attempt_count,expected', [
        (0, 1000),
        (1, 2000),
        (2, 4000),
        (3, 8000),
        (5, 32000),
        (6, 60000),
        (10, 60000),
        (500, 60000),
    ])
    def test_known_values(self, attempt_count, expected):
        assert backoff_delay_ms(attempt_count) == expected

    @settings(max_examples=200)
    @given(k=st.integers(min_value=0, max_value=10_000))
    def test_non_decreasing_and_capped(self, k):
        assert backoff_delay_ms(k) <= backoff_delay_ms(k + 1)
        assert backoff_delay_ms(k) <= 60000

    def test_uses_configured_base_and_cap(self, settings):
        settings.DELIVERY_RETRY_BASE_DELAY_MS = 500
        settings.DELIVERY_RETRY_MAX_DELAY_MS = 3000
        assert backoff_delay_ms(1) == 1000
        assert backoff_delay_ms(3) == 3000


class TestNextStatus:
    """Status derived at the end of a cycle."""

    def test_all_delivered_is_success_even_on_last_attempt(self):
        assert next_status(True, 3, 3) == WebhookEvent.Status.SUCCESS

    def test_partial_with_budget_left_is_retrying(self):
        assert next_status(False, 1, 3) == WebhookEvent.Status.RETRYING

    def test_partial_on_last_attempt_is_failed(self):
        assert next_status(False, 3, 3) == WebhookEvent.Status.FAILED

    def test_single_retry_budget_fails_immediately(self):
        assert next_status(False, 1, 1) == WebhookEvent.Status.FAILED

    @settings(max_examples=100)
    @given(
        delivered_all=st.booleans(),
        attempt_count=st.integers(min_value=1, max_value=50),
        max_retries=st.integers(min_value=1, max_value=10),
    )
    def test_never_returns_pending(self, delivered_all, attempt_count, max_retries):
        assert next_status(delivered_all, attempt_count, max_retries) in {
            WebhookEvent.Status.SUCCESS,
            WebhookEvent.Status.RETRYING,
            WebhookEvent.Status.FAILED,
        }
