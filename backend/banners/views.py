from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from rest_framework import status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from audit.services import audit_service

from .models import PromotionalBanner
from .serializers import BannerOrderSerializer, PromotionalBannerSerializer

logger = logging.getLogger(__name__)

ACTIVE_CACHE_KEY = "banners:active"


def invalidate_active_banners():
    cache.delete(ACTIVE_CACHE_KEY)


class PromotionalBannerViewSet(viewsets.ModelViewSet):
    queryset = PromotionalBanner.objects.all().order_by('order', 'id')
    serializer_class = PromotionalBannerSerializer
    permission_classes = [IsAdminRole]

    def list(self, request, *args, **kwargs):
        data = self.get_serializer(self.get_queryset(), many=True).data
        return Response({"success": True, "data": data})

    def retrieve(self, request, *args, **kwargs):
        return Response({"success": True, "data": self.get_serializer(self.get_object()).data})

    def perform_create(self, serializer):
        banner = serializer.save()
        audit_service.log_created(banner, request=self.request)
        invalidate_active_banners()

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        self.perform_create(ser)
        return Response(
            {"success": True, "message": "Promotional banner created successfully", "data": ser.data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        banner = self.get_object()
        old_values = audit_service.to_values(banner)
        ser = self.get_serializer(banner, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        banner = ser.save()
        audit_service.log_updated(banner, old_values, request=request)
        invalidate_active_banners()
        return Response({"success": True, "message": "Promotional banner updated successfully", "data": ser.data})

    def destroy(self, request, *args, **kwargs):
        banner = self.get_object()
        with transaction.atomic():
            audit_service.log_deleted(banner, request=request)
            banner.delete()
        invalidate_active_banners()
        return Response({"success": True, "message": "Promotional banner deleted successfully"})

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        banner = self.get_object()
        old_values = audit_service.to_values(banner)
        banner.is_active = not banner.is_active
        banner.save(update_fields=['is_active', 'updated_at'])
        audit_service.log_updated(banner, old_values, request=request)
        invalidate_active_banners()
        return Response({
            "success": True,
            "message": "Banner status updated successfully",
            "data": self.get_serializer(banner).data,
        })

    @action(detail=False, methods=['post'])
    def reorder(self, request):
        ser = BannerOrderSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        wanted = {row['id']: row['order'] for row in ser.validated_data['banners']}

        with transaction.atomic():
            rows = list(PromotionalBanner.objects.select_for_update().filter(pk__in=wanted))
            missing = sorted(set(wanted) - {b.pk for b in rows})
            if missing:
                return Response({"detail": f"Unknown banner ids: {missing}"}, status=status.HTTP_400_BAD_REQUEST)
            for banner in rows:
                banner.order = wanted[banner.pk]
            PromotionalBanner.objects.bulk_update(rows, ['order'])
            audit_service.log(
                "banner.reordered",
                metadata={"banners": [{"id": pk, "order": order} for pk, order in sorted(wanted.items())]},
                request=request,
            )

        invalidate_active_banners()
        logger.info("Reordered %d banners", len(rows))
        return Response({"success": True, "message": "Banner order updated successfully"})


class ActiveBannersView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        data = cache.get(ACTIVE_CACHE_KEY)
        if data is None:
            qs = PromotionalBanner.objects.filter(is_active=True).order_by('order', 'id')
            data = list(PromotionalBannerSerializer(qs, many=True).data)
            cache.set(ACTIVE_CACHE_KEY, data, getattr(settings, "BANNER_CACHE_TTL", 3600))
        return Response({"success": True, "data": data})
