from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status, views
from rest_framework.response import Response

from accounts.permissions import IsAdminOrManager, IsAdminRole
from core.pagination import StandardResultsSetPagination

from .models import AuditLog
from .serializers import AuditLogSerializer, PurgeSerializer
from .services import audit_service

FILTER_PARAMS = ('event', 'user_id', 'start_date', 'end_date', 'recent_days', 'auditable_type')


def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return None


class AuditLogListView(views.APIView):
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        filters = {k: request.query_params.get(k) for k in FILTER_PARAMS if request.query_params.get(k)}
        if 'recent_days' in filters and _int_param(request, 'recent_days', 0) is None:
            return Response({"detail": "recent_days must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(audit_service.get_logs(filters), request, view=self)
        return paginator.get_paginated_response(AuditLogSerializer(page, many=True).data)


class AuditLogStatsView(views.APIView):
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        days = _int_param(request, 'days', 30)
        if days is None or days < 1:
            return Response({"detail": "days must be a positive integer"}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"success": True, "data": audit_service.get_stats(days)})


class AuditLogEventsView(views.APIView):
    permission_classes = [IsAdminOrManager]

    def get(self, request):
        return Response({"success": True, "data": audit_service.event_types()})


class AuditLogDetailView(views.APIView):
    permission_classes = [IsAdminOrManager]

    def get(self, request, pk):
        entry = get_object_or_404(AuditLog.objects.select_related('user'), pk=pk)
        return Response({"success": True, "data": AuditLogSerializer(entry).data})


class AuditLogPurgeView(views.APIView):
    permission_classes = [IsAdminRole]

    def post(self, request):
        ser = PurgeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        deleted = audit_service.purge_old_logs(ser.validated_data['days'])
        return Response({
            "success": True,
            "message": f"Purged {deleted} old audit log(s)",
            "deleted_count": deleted,
        })
