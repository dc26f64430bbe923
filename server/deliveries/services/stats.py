"""
Delivery statistics for the dashboard summary.
"""
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import List, Optional

from django.utils import timezone

from deliveries.models import Project, WebhookEvent, WebhookRoute

CHART_DAYS = 7


@dataclass
class ChartDay:
    date: str
    total: int
    success: int
    failed: int


@dataclass
class StatsSummary:
    total_webhooks: int
    success_count: int
    failed_count: int
    pending_count: int
    success_rate: float
    projects: int
    active_routes: int
    chart: List[ChartDay] = field(default_factory=list)


def success_rate(success: int, total: int) -> float:
    """Percentage rounded to one decimal; 100 when nothing was received."""
    if total == 0:
        return 100.0
    return round(success / total * 100, 1)


def _day_counts(day_start: datetime) -> ChartDay:
    events = WebhookEvent.objects.filter(
        created_at__gte=day_start,
        created_at__lt=day_start + timedelta(days=1),
    )
    return ChartDay(
        date=day_start.strftime('%d/%m'),
        total=events.count(),
        success=events.filter(status=WebhookEvent.Status.SUCCESS).count(),
        failed=events.filter(status=WebhookEvent.Status.FAILED).count(),
    )


def build_summary(now: Optional[datetime] = None) -> StatsSummary:
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    tz = timezone.get_current_timezone()

    events = WebhookEvent.objects.all()
    total = events.count()
    success = events.filter(status=WebhookEvent.Status.SUCCESS).count()

    chart = []
    for offset in range(CHART_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        chart.append(_day_counts(timezone.make_aware(datetime.combine(day, time.min), tz)))

    return StatsSummary(
        total_webhooks=total,
        success_count=success,
        failed_count=events.filter(status=WebhookEvent.Status.FAILED).count(),
        pending_count=events.filter(
            status__in=[WebhookEvent.Status.PENDING, WebhookEvent.Status.RETRYING]
        ).count(),
        success_rate=success_rate(success, total),
        projects=Project.objects.count(),
        active_routes=WebhookRoute.objects.filter(is_active=True).count(),
        chart=chart,
    )
