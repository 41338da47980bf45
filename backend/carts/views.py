from __future__ import annotations

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.http import Http404
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminOrManager, IsAdminRole
from audit.services import audit_service
from core.pagination import StandardResultsSetPagination

from .models import AbandonedCart
from .serializers import AbandonedCartSerializer

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


class AbandonedCartPagination(StandardResultsSetPagination):
    page_size = 15


class AbandonedCartViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Back-office view of carts shoppers left behind."""

    queryset = AbandonedCart.objects.select_related('user').order_by('-abandoned_at', '-id')
    serializer_class = AbandonedCartSerializer
    pagination_class = AbandonedCartPagination

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAdminRole()]
        return [IsAdminOrManager()]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action != 'list':
            return qs
        qs = qs.filter(is_abandoned=True)
        search = self.request.query_params.get('search')
        if search:
            qs = qs.filter(Q(session_id__icontains=search) | Q(user__email__icontains=search))
        recovery_emails = self.request.query_params.get('recovery_emails')
        if recovery_emails not in (None, ''):
            qs = qs.filter(recovery_email_count=int(recovery_emails))
        return qs

    def list(self, request, *args, **kwargs):
        recovery_emails = request.query_params.get('recovery_emails')
        if recovery_emails not in (None, '') and not recovery_emails.isdigit():
            return Response(
                {"detail": "recovery_emails must be a non-negative integer"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        cart = self.get_object()
        if not cart.is_abandoned:
            raise Http404("This cart is not abandoned")
        return Response({"success": True, "data": self.get_serializer(cart).data})

    def destroy(self, request, *args, **kwargs):
        cart = self.get_object()
        if not cart.is_abandoned:
            return Response({"detail": "This cart is not abandoned"}, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            audit_service.log_deleted(cart, request=request)
            cart.delete()
        logger.info("Deleted abandoned cart %s", cart.session_id)
        return Response({"success": True, "message": "Abandoned cart deleted successfully"})

    @action(detail=False, methods=['get'])
    def statistics(self, request):
        abandoned = AbandonedCart.objects.filter(is_abandoned=True)
        since = timezone.now() - timedelta(days=RECENT_DAYS)
        totals = abandoned.aggregate(
            total_abandoned=Count('id'),
            total_value=Sum('total_amount'),
            none=Count('id', filter=Q(recovery_email_count=0)),
            one=Count('id', filter=Q(recovery_email_count=1)),
            two=Count('id', filter=Q(recovery_email_count=2)),
            three_plus=Count('id', filter=Q(recovery_email_count__gte=3)),
            recent_abandoned=Count('id', filter=Q(abandoned_at__gte=since)),
        )
        return Response({"success": True, "data": {
            "total_abandoned": totals['total_abandoned'],
            "total_value": str(totals['total_value'] or "0.00"),
            "by_recovery_count": {
                "none": totals['none'],
                "one": totals['one'],
                "two": totals['two'],
                "three_plus": totals['three_plus'],
            },
            "recent_abandoned": totals['recent_abandoned'],
        }})
