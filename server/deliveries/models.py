"""
Data models for Webhook Hub.
"""
import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Project(models.Model):
    """Groups routes; its name is forwarded to destinations."""

    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class WebhookRoute(models.Model):
    """
    An inbound inbox identified by slug and secret.
    Owns the destinations an event is fanned out to and the retry budget.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='routes'
    )
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=120, unique=True)
    secret = models.CharField(max_length=128)
    retention_days = models.PositiveIntegerField(
        default=30,
        validators=[MinValueValidator(7), MaxValueValidator(90)]
    )
    max_retries = models.PositiveIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(10)]
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.slug})"

    @property
    def inbound_url(self) -> str:
        return f"/api/inbound/{self.slug}"


class WebhookDestination(models.Model):
    """
    One outbound target of a route.
    Lower priority is delivered first; deactivating keeps attempt history.
    """

    route = models.ForeignKey(
        WebhookRoute,
        on_delete=models.CASCADE,
        related_name='destinations'
    )
    label = models.CharField(max_length=200)
    endpoint = models.URLField(max_length=2000)
    priority = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['route', 'id']

    def __str__(self):
        return f"{self.label} -> {self.endpoint}"


class WebhookEvent(models.Model):
    """
    One inbound occurrence on a route plus the state of its delivery cycles.
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        RETRYING = 'RETRYING', 'Retrying'
        SUCCESS = 'SUCCESS', 'Success'
        FAILED = 'FAILED', 'Failed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    route = models.ForeignKey(
        WebhookRoute,
        on_delete=models.CASCADE,
        related_name='events'
    )
    payload = models.JSONField(default=dict, blank=True)
    headers = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    attempt_count = models.PositiveIntegerField(default=0)
    destination_count = models.PositiveIntegerField(default=0)
    delivered_count = models.PositiveIntegerField(default=0)
    last_attempt_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    # Bumped on every write made by a delivery cycle or a manual retry
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='deliveries_event_status_idx'),
        ]

    def __str__(self):
        return f"Event {self.id} - {self.status}"

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.Status.SUCCESS, self.Status.FAILED)


class DeliveryAttempt(models.Model):
    """
    Records one try of one destination within one delivery cycle.
    Append-only audit trail.
    """

    event = models.ForeignKey(
        WebhookEvent,
        on_delete=models.CASCADE,
        related_name='attempts'
    )
    destination = models.ForeignKey(
        WebhookDestination,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attempts'
    )
    target_endpoint = models.URLField(max_length=2000)
    response_status = models.PositiveIntegerField(null=True, blank=True)
    response_body = models.TextField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    success = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['event', 'created_at'], name='deliveries_attempt_event_idx'),
        ]

    def __str__(self):
        return f"Attempt {self.id} for Event {self.event_id} - {'Success' if self.success else 'Failed'}"
