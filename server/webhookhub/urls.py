"""
URL configuration for webhookhub project.
"""
from django.contrib import admin
from django.urls import path, include

from deliveries.views import HealthView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health', HealthView.as_view(), name='health'),
    path('api/', include('deliveries.urls')),
]
