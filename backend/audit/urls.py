from django.urls import path

from .views import (
    AuditLogDetailView,
    AuditLogEventsView,
    AuditLogListView,
    AuditLogPurgeView,
    AuditLogStatsView,
)

urlpatterns = [
    path('', AuditLogListView.as_view(), name='audit-log-list'),
    path('stats/', AuditLogStatsView.as_view(), name='audit-log-stats'),
    path('events/', AuditLogEventsView.as_view(), name='audit-log-events'),
    path('purge/', AuditLogPurgeView.as_view(), name='audit-log-purge'),
    path('<int:pk>/', AuditLogDetailView.as_view(), name='audit-log-detail'),
]
