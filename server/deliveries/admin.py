"""
Django admin configuration for deliveries app.

Projects, routes and destinations are managed here; events and delivery
attempts are a read-only audit trail.
"""
from django.contrib import admin
from deliveries.models import (
    DeliveryAttempt,
    Project,
    WebhookDestination,
    WebhookEvent,
    WebhookRoute,
)


class WebhookDestinationInline(admin.TabularInline):
    """Inline editing of a route's destinations."""
    model = WebhookDestination
    extra = 1
    fields = ('label', 'endpoint', 'priority', 'is_active')
    ordering = ('priority', 'id')

    def has_delete_permission(self, request, obj=None):
        """Deactivate destinations instead of deleting their history."""
        return False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'created_at')
    search_fields = ('name',)


@admin.register(WebhookRoute)
class WebhookRouteAdmin(admin.ModelAdmin):
    """Admin interface for WebhookRoute model."""

    list_display = ('id', 'name', 'slug', 'project', 'max_retries', 'is_active', 'created_at')
    list_filter = ('is_active', 'project')
    search_fields = ('name', 'slug', 'project__name')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        ('Route', {
            'fields': ('project', 'name', 'slug', 'secret', 'is_active')
        }),
        ('Policy', {
            'fields': ('max_retries', 'retention_days')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    inlines = [WebhookDestinationInline]


class DeliveryAttemptInline(admin.TabularInline):
    """Inline display of delivery attempts for an event."""
    model = DeliveryAttempt
    extra = 0
    readonly_fields = ('destination', 'target_endpoint', 'created_at', 'response_status',
                       'response_body', 'error_message', 'success')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """Admin interface for WebhookEvent model."""

    list_display = ('id', 'route', 'status', 'attempt_count', 'delivered_count',
                    'destination_count', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('id', 'route__slug', 'error_message')
    readonly_fields = ('id', 'route', 'status', 'attempt_count', 'destination_count',
                       'delivered_count', 'last_attempt_at', 'error_message', 'version',
                       'created_at', 'updated_at', 'payload', 'headers')

    fieldsets = (
        ('Status', {
            'fields': ('id', 'route', 'status', 'error_message')
        }),
        ('Delivery', {
            'fields': ('attempt_count', 'destination_count', 'delivered_count',
                       'last_attempt_at', 'version')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
        ('Payload', {
            'fields': ('payload', 'headers'),
            'classes': ('collapse',)
        }),
    )

    inlines = [DeliveryAttemptInline]

    def has_add_permission(self, request):
        """Events only arrive through the inbound endpoint."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Disable event deletion through admin."""
        return False


@admin.register(DeliveryAttempt)
class DeliveryAttemptAdmin(admin.ModelAdmin):
    """Admin interface for DeliveryAttempt model."""

    list_display = ('id', 'event', 'destination', 'created_at', 'response_status', 'success')
    list_filter = ('success', 'created_at')
    search_fields = ('event__id', 'target_endpoint')
    readonly_fields = ('event', 'destination', 'target_endpoint', 'created_at', 'response_status',
                       'response_body', 'error_message', 'success')

    fieldsets = (
        ('Delivery Information', {
            'fields': ('event', 'destination', 'target_endpoint', 'created_at', 'success')
        }),
        ('Response', {
            'fields': ('response_status', 'response_body', 'error_message')
        }),
    )

    def has_add_permission(self, request):
        """Disable manual delivery attempt creation through admin."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Disable delivery attempt deletion through admin."""
        return False
