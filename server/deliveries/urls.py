"""
URL configuration for deliveries app.
"""
from django.urls import path
from deliveries.views import (
    EventDetailView,
    EventListView,
    EventRetryView,
    InboundWebhookView,
    StatsSummaryView,
)

urlpatterns = [
    path('inbound/<slug:slug>', InboundWebhookView.as_view(), name='inbound-webhook'),
    path('events/<str:event_id>', EventDetailView.as_view(), name='event-detail'),
    path('events/<str:event_id>/retry', EventRetryView.as_view(), name='event-retry'),
    path('webhooks', EventListView.as_view(), name='event-list'),
    path('stats/summary', StatsSummaryView.as_view(), name='stats-summary'),
]
