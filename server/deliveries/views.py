"""
API views for Webhook Hub.
"""
import logging
import uuid
from django.db.models import Q
from django.http import QueryDict
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.parsers import JSONParser
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from deliveries.exceptions import NotFoundError, ValidationError, WebhookHubError
from deliveries.models import WebhookEvent
from deliveries.parsers import PlainTextParser
from deliveries.serializers import (
    EventDetailSerializer,
    EventListItemSerializer,
    EventListQuerySerializer,
    StatsSummarySerializer,
)
from deliveries.services.ingestion import IngestionReceiver
from deliveries.services.manual_retry import ManualRetryController
from deliveries.services.queue import get_delivery_queue
from deliveries.services.stats import build_summary
from deliveries.services.store import EventStore

logger = logging.getLogger(__name__)

SECRET_HEADER = 'x-route-secret'


def error_response(error: WebhookHubError, correlation_id: str) -> Response:
    return Response(
        {
            'error': error.message,
            'correlation_id': correlation_id
        },
        status=error.status_code
    )


def internal_error_response(correlation_id: str) -> Response:
    return Response(
        {
            'error': 'Internal server error',
            'correlation_id': correlation_id
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


class HealthView(APIView):
    """GET /health"""

    def get(self, request):
        return Response({'status': 'ok'})


@method_decorator(csrf_exempt, name='dispatch')
class InboundWebhookView(APIView):
    """
    Inbound endpoint for events sent to a route.

    POST /api/inbound/<slug>?secret=<secret>
    - Secret from the x-route-secret header, else the secret query parameter
    - JSON bodies are stored as parsed, text/plain bodies as a string
    - Stores the payload and headers as a PENDING event
    - Enqueues the first delivery cycle
    - Returns 202 Accepted with the event id
    """

    parser_classes = [JSONParser, PlainTextParser]

    def post(self, request, slug):
        """
        Handle an inbound event.

        Returns:
            202 Accepted: Event stored and queued for delivery
            400 Bad Request: Malformed body, unsupported media type or no active destinations
            401 Unauthorized: Secret mismatch
            404 Not Found: Unknown or inactive route
            500 Internal Server Error: Unexpected error
        """
        correlation_id = str(uuid.uuid4())
        provided_secret = request.headers.get(SECRET_HEADER)
        if provided_secret is None:
            provided_secret = request.query_params.get('secret', '')

        try:
            try:
                payload = request.data
            except ParseError as e:
                raise ValidationError('Malformed request body') from e
            except UnsupportedMediaType as e:
                raise ValidationError('Unsupported media type, send JSON or plain text') from e
            if payload is None or isinstance(payload, QueryDict):
                payload = {}

            receiver = IngestionReceiver(queue=get_delivery_queue(), store=EventStore())
            event = receiver.receive(
                slug,
                provided_secret,
                payload,
                headers=dict(request.headers),
            )

            logger.info(
                f"Event {event.id} accepted on route {slug}, "
                f"correlation_id={correlation_id}"
            )

            return Response(
                {
                    'id': str(event.id),
                    'status': 'enqueued'
                },
                status=status.HTTP_202_ACCEPTED
            )

        except WebhookHubError as e:
            logger.warning(
                f"Inbound event on route {slug} rejected: {e.message}, "
                f"correlation_id={correlation_id}"
            )
            return error_response(e, correlation_id)
        except Exception as e:
            logger.error(
                f"Error processing inbound event on route {slug}: {e}, "
                f"correlation_id={correlation_id}",
                exc_info=True
            )
            return internal_error_response(correlation_id)


@method_decorator(csrf_exempt, name='dispatch')
class EventRetryView(APIView):
    """
    POST /api/events/<id>/retry

    Resets the event to PENDING and enqueues a delivery cycle immediately.
    """

    def post(self, request, event_id):
        correlation_id = str(uuid.uuid4())
        try:
            controller = ManualRetryController(queue=get_delivery_queue(), store=EventStore())
            controller.retry(event_id)
            logger.info(f"Manual retry queued for event {event_id}, correlation_id={correlation_id}")
            return Response({'status': 'queued'}, status=status.HTTP_200_OK)

        except WebhookHubError as e:
            logger.warning(
                f"Manual retry of event {event_id} rejected: {e.message}, "
                f"correlation_id={correlation_id}"
            )
            return error_response(e, correlation_id)
        except Exception as e:
            logger.error(
                f"Error retrying event {event_id}: {e}, correlation_id={correlation_id}",
                exc_info=True
            )
            return internal_error_response(correlation_id)


class EventDetailView(APIView):
    """GET /api/events/<id> with route, destinations and attempts."""

    def get(self, request, event_id):
        correlation_id = str(uuid.uuid4())
        try:
            event = EventStore().get_event(event_id)
            if event is None:
                raise NotFoundError('Event not found')
            return Response(EventDetailSerializer(event).data)
        except WebhookHubError as e:
            return error_response(e, correlation_id)


class EventListView(APIView):
    """
    GET /api/webhooks?search=<text>&limit=<n>

    Most recent events first; search matches route or project name.
    """

    def get(self, request):
        correlation_id = str(uuid.uuid4())
        query = EventListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {
                    'error': 'Invalid query parameters',
                    'details': query.errors,
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        events = WebhookEvent.objects.select_related('route', 'route__project')
        search = query.validated_data.get('search')
        if search:
            events = events.filter(
                Q(route__name__icontains=search) | Q(route__project__name__icontains=search)
            )
        events = events.order_by('-created_at')[:query.validated_data['limit']]

        return Response(EventListItemSerializer(events, many=True).data)


class StatsSummaryView(APIView):
    """GET /api/stats/summary"""

    def get(self, request):
        return Response(StatsSummarySerializer(build_summary()).data)
