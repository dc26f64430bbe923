"""
Response projections for the Webhook Hub API.
"""
from django.conf import settings
from rest_framework import serializers

from deliveries.models import DeliveryAttempt, Project, WebhookDestination, WebhookEvent
from deliveries.services.ingestion import normalize_headers


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ('id', 'name', 'description')


class DestinationSerializer(serializers.ModelSerializer):
    isActive = serializers.BooleanField(source='is_active')

    class Meta:
        model = WebhookDestination
        fields = ('id', 'label', 'endpoint', 'priority', 'isActive')


class EventRouteSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    slug = serializers.CharField()
    project = ProjectSerializer()
    inboundUrl = serializers.CharField(source='inbound_url')
    secret = serializers.CharField()
    destinations = serializers.SerializerMethodField()

    def get_destinations(self, route):
        # Stable sort keeps stored order for equal priorities
        destinations = sorted(route.destinations.order_by('id'), key=lambda d: d.priority)
        return DestinationSerializer(destinations, many=True).data


class AttemptDestinationSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookDestination
        fields = ('id', 'label', 'endpoint')


class AttemptSerializer(serializers.ModelSerializer):
    responseStatus = serializers.IntegerField(source='response_status', allow_null=True)
    responseBody = serializers.CharField(source='response_body', allow_null=True)
    errorMessage = serializers.CharField(source='error_message', allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at')
    destination = AttemptDestinationSerializer(allow_null=True, read_only=True)

    class Meta:
        model = DeliveryAttempt
        fields = (
            'id', 'success', 'responseStatus', 'responseBody',
            'errorMessage', 'createdAt', 'destination',
        )


class EventDetailSerializer(serializers.ModelSerializer):
    timestamp = serializers.DateTimeField(source='created_at')
    lastAttemptAt = serializers.DateTimeField(source='last_attempt_at', allow_null=True)
    headers = serializers.SerializerMethodField()
    attemptCount = serializers.IntegerField(source='attempt_count')
    destinationCount = serializers.IntegerField(source='destination_count')
    deliveredCount = serializers.IntegerField(source='delivered_count')
    errorMessage = serializers.CharField(source='error_message', allow_null=True)
    route = EventRouteSerializer()
    attempts = serializers.SerializerMethodField()

    class Meta:
        model = WebhookEvent
        fields = (
            'id', 'status', 'timestamp', 'lastAttemptAt', 'payload', 'headers',
            'attemptCount', 'destinationCount', 'deliveredCount', 'errorMessage',
            'route', 'attempts',
        )

    def get_headers(self, event):
        return normalize_headers(event.headers if isinstance(event.headers, dict) else None)

    def get_attempts(self, event):
        attempts = event.attempts.select_related('destination').order_by('-created_at', '-id')
        return AttemptSerializer(attempts, many=True).data


class EventListItemSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='route.name')
    project = serializers.CharField(source='route.project.name')
    attempts = serializers.IntegerField(source='attempt_count')
    timestamp = serializers.DateTimeField(source='created_at')
    routeId = serializers.IntegerField(source='route_id')
    slug = serializers.CharField(source='route.slug')
    destinationCount = serializers.IntegerField(source='destination_count')
    deliveredCount = serializers.IntegerField(source='delivered_count')

    class Meta:
        model = WebhookEvent
        fields = (
            'id', 'name', 'project', 'status', 'attempts', 'timestamp',
            'routeId', 'slug', 'destinationCount', 'deliveredCount',
        )


class EventListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=getattr(settings, 'EVENT_LIST_MAX_LIMIT', 100),
        default=getattr(settings, 'EVENT_LIST_DEFAULT_LIMIT', 50),
    )


class ChartDaySerializer(serializers.Serializer):
    date = serializers.CharField()
    total = serializers.IntegerField()
    success = serializers.IntegerField()
    failed = serializers.IntegerField()


class StatsSummarySerializer(serializers.Serializer):
    totalWebhooks = serializers.IntegerField(source='total_webhooks')
    successCount = serializers.IntegerField(source='success_count')
    failedCount = serializers.IntegerField(source='failed_count')
    pendingCount = serializers.IntegerField(source='pending_count')
    successRate = serializers.FloatField(source='success_rate')
    projects = serializers.IntegerField()
    activeRoutes = serializers.IntegerField(source='active_routes')
    chart = ChartDaySerializer(many=True)
