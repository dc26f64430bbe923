"""
HTTP client for delivering events to destination endpoints.
"""
import logging
from typing import Optional

import httpx
from django.conf import settings
from django.utils import timezone

from deliveries.exceptions import DeliveryTransportError
from deliveries.services.signing import serialize_payload, sign_bytes

logger = logging.getLogger(__name__)

HEADER_EVENT_ID = 'x-webhookhub-event-id'
HEADER_ROUTE = 'x-webhookhub-route'
HEADER_PROJECT = 'x-webhookhub-project'
HEADER_SIGNATURE = 'x-webhookhub-signature'
HEADER_TIMESTAMP = 'x-webhookhub-timestamp'


def build_headers(event_id: str, route_slug: str, project_name: str, signature: str) -> dict:
    """Headers sent with every delivery."""
    return {
        'content-type': 'application/json',
        HEADER_EVENT_ID: event_id,
        HEADER_ROUTE: route_slug,
        HEADER_PROJECT: project_name,
        HEADER_SIGNATURE: signature,
        HEADER_TIMESTAMP: timezone.now().isoformat(),
    }


class DestinationClient:
    """
    Posts signed event payloads to destination endpoints.

    One instance can serve a whole delivery cycle; calls are made one at a
    time by the orchestrator.
    """

    def __init__(self, timeout: Optional[float] = None):
        if timeout is None:
            timeout = getattr(settings, 'DESTINATION_TIMEOUT_SECONDS', 30.0)
        self.timeout = timeout

    def send(self, endpoint: str, *, event_id: str, route_slug: str,
             project_name: str, secret: str, payload) -> httpx.Response:
        """
        Sends one event to one destination.

        Args:
            endpoint: Destination URL
            event_id: Event identifier, forwarded as a header
            route_slug: Route slug, forwarded as a header
            project_name: Project name, forwarded as a header
            secret: Route secret used to sign the body
            payload: Event payload

        Returns:
            HTTP response from the destination, whatever its status

        Raises:
            DeliveryTransportError: On network/timeout errors or an unusable endpoint URL
        """
        body = serialize_payload(payload)
        headers = build_headers(event_id, route_slug, project_name, sign_bytes(secret, body))

        logger.info(f"Delivering event {event_id} to {endpoint}")

        try:
            response = httpx.post(
                endpoint,
                content=body,
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout delivering event {event_id} to {endpoint}: {e}")
            raise DeliveryTransportError(str(e) or 'Request timed out') from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error delivering event {event_id} to {endpoint}: {e}")
            raise DeliveryTransportError(str(e) or e.__class__.__name__) from e
        except (httpx.InvalidURL, ValueError) as e:
            logger.error(f"Invalid endpoint {endpoint!r} for event {event_id}: {e}")
            raise DeliveryTransportError(str(e) or 'Invalid endpoint URL') from e

        logger.info(f"Destination {endpoint} responded {response.status_code} for event {event_id}")
        return response
