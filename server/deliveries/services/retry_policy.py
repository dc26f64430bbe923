"""
Backoff and status derivation for delivery cycles.
"""
from django.conf import settings

from deliveries.models import WebhookEvent


def backoff_delay_ms(attempt_count: int) -> int:
    """
    Delay before the next delivery cycle after `attempt_count` completed cycles.

    delay(k) = min(2^k * base, cap), with base 1000ms and cap 60000ms by default.
    """
    base = getattr(settings, 'DELIVERY_RETRY_BASE_DELAY_MS', 1000)
    cap = getattr(settings, 'DELIVERY_RETRY_MAX_DELAY_MS', 60000)
    # Past this exponent the delay is capped anyway; avoids huge integers
    if attempt_count >= 63:
        return cap
    return min((2 ** attempt_count) * base, cap)


def next_status(delivered_all: bool, attempt_count: int, max_retries: int) -> str:
    """Status of an event after a cycle, given the attempt count including that cycle."""
    if delivered_all:
        return WebhookEvent.Status.SUCCESS
    if attempt_count >= max_retries:
        return WebhookEvent.Status.FAILED
    return WebhookEvent.Status.RETRYING
