"""
Error taxonomy for Webhook Hub.

Request-facing errors carry the HTTP status code the API answers with.
Delivery errors describe one destination's failure inside a cycle; they are
recorded as attempts and never reach a caller.
"""


class WebhookHubError(Exception):
    """Base class for errors handled at the request boundary."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(WebhookHubError):
    """Malformed input."""

    status_code = 400
    default_message = 'Invalid request'


class NotFoundError(WebhookHubError):
    """Unknown or inactive route, unknown event."""

    status_code = 404
    default_message = 'Not found'


class AuthError(WebhookHubError):
    """Route secret mismatch."""

    status_code = 401
    default_message = 'Invalid secret'


class NoActiveDestinationsError(WebhookHubError):
    """Route has no active destination to deliver to."""

    status_code = 400
    default_message = 'No active destinations configured'


class InfrastructureError(WebhookHubError):
    """Store or queue unavailable."""

    status_code = 503
    default_message = 'Service unavailable'


class DeliveryError(Exception):
    """A single destination could not be delivered to."""


class DeliveryTransportError(DeliveryError):
    """Network-level failure: timeout, DNS, refused connection."""


class DeliveryHTTPError(DeliveryError):
    """Destination answered with a non-ok status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")
