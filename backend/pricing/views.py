from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Q
from rest_framework import status, views, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from audit.services import audit_service
from core.pagination import StandardResultsSetPagination
from core.services.payment_flow import gate_snapshot, load_payment_flow

from .dataclasses import InsurancePlan, OrderContext
from .models import OrderCharge, ShippingInsurance, TaxConfiguration
from .serializers import (
    InsuranceTestSerializer,
    OrderChargeSerializer,
    OrderContextSerializer,
    ReorderSerializer,
    ShippingInsuranceSerializer,
    TaxConfigurationSerializer,
)
from .services.amounts import coverage_amount, insurance_premium
from .services.composition import evaluate
from .services.exceptions import EvaluationError, ValidationError
from .services.rule_store import CHARGE, INSURANCE, TAX, store
from .services.surcharges import load_surcharge_policy
from .services.utils import finalize

logger = logging.getLogger(__name__)


def _validation_failed(exc: ValidationError):
    return Response({"detail": str(exc), "errors": exc.errors}, status=status.HTTP_400_BAD_REQUEST)


class RuleConfigViewSet(viewsets.ModelViewSet):
    """CRUD over one rule kind, with writes routed through the rule store."""

    permission_classes = [IsAdminRole]
    kind: str = None
    noun: str = "Rule"

    def get_queryset(self):
        return store.queryset(self.kind)

    def list(self, request, *args, **kwargs):
        rows = self.filter_queryset(self.get_queryset())
        return Response({"success": True, "data": self.get_serializer(rows, many=True).data})

    def retrieve(self, request, *args, **kwargs):
        return Response({"success": True, "data": self.get_serializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        try:
            with transaction.atomic():
                obj = store.upsert(self.kind, request.data)
                audit_service.log_created(obj, request=request)
        except ValidationError as exc:
            return _validation_failed(exc)
        return Response(
            {"success": True, "message": f"{self.noun} created successfully", "data": self.get_serializer(obj).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        old_values = audit_service.to_values(instance)
        try:
            with transaction.atomic():
                obj = store.upsert(self.kind, request.data, instance=instance, partial=partial)
                audit_service.log_updated(obj, old_values, request=request)
        except ValidationError as exc:
            return _validation_failed(exc)
        return Response({
            "success": True,
            "message": f"{self.noun} updated successfully",
            "data": self.get_serializer(obj).data,
        })

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        with transaction.atomic():
            audit_service.log_deleted(instance, request=request)
            store.delete(self.kind, instance)
        return Response({"success": True, "message": f"{self.noun} deleted successfully"})

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        instance = self.get_object()
        old_values = audit_service.to_values(instance)
        with transaction.atomic():
            obj = store.toggle(self.kind, instance.pk)
            audit_service.log_updated(obj, old_values, request=request)
        return Response({
            "success": True,
            "message": f"{self.noun} status updated",
            "data": self.get_serializer(obj).data,
        })


class ReorderMixin:
    @action(detail=False, methods=["post"])
    def reorder(self, request):
        ser = ReorderSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        items = [dict(item) for item in ser.validated_data["items"]]
        try:
            count = store.reorder(self.kind, items)
        except ValidationError as exc:
            return _validation_failed(exc)
        audit_service.log(
            f"{self.kind}.reordered",
            metadata={"items": items},
            request=request,
        )
        return Response({"success": True, "message": f"{count} priorities updated"})


class TaxConfigurationViewSet(ReorderMixin, RuleConfigViewSet):
    kind = TAX
    noun = "Tax configuration"
    serializer_class = TaxConfigurationSerializer
    queryset = TaxConfiguration.objects.all()


class OrderChargeViewSet(ReorderMixin, RuleConfigViewSet):
    kind = CHARGE
    noun = "Order charge"
    serializer_class = OrderChargeSerializer
    queryset = OrderCharge.objects.all()


class ShippingInsuranceViewSet(RuleConfigViewSet):
    kind = INSURANCE
    noun = "Insurance plan"
    serializer_class = ShippingInsuranceSerializer
    queryset = ShippingInsurance.objects.all()

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset()
        search = request.query_params.get("search")
        active = request.query_params.get("active")
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if active is not None and active != "":
            qs = qs.filter(is_active=active.lower() in ("1", "true", "yes"))

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(self.get_serializer(page, many=True).data)

    @action(detail=False, methods=["post"], url_path="test-calculation")
    def test_calculation(self, request):
        ser = InsuranceTestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        row = ShippingInsurance.objects.filter(pk=data["insurance_id"]).first()
        if row is None:
            return Response({"detail": "Insurance plan not found"}, status=status.HTTP_404_NOT_FOUND)

        plan = InsurancePlan.from_model(row)
        order_value = data["order_value"]
        context = OrderContext(
            subtotal=order_value,
            zone=data["zone"],
            is_remote=data["is_remote"],
            has_fragile_items=data["has_fragile_items"],
            has_electronics=data["has_electronics"],
        )

        in_range = order_value >= plan.min_order_value and (
            plan.max_order_value is None or order_value <= plan.max_order_value
        )
        calculation = {
            "plan_id": plan.id,
            "plan_code": plan.code,
            "order_value": str(finalize(order_value)),
            "eligible": in_range and plan.applies(context),
            "premium": "0.00",
            "base_premium": "0.00",
            "coverage_amount": "0.00",
            "claim_processing_days": plan.claim_processing_days,
        }
        if in_range:
            calculation["base_premium"] = str(finalize(insurance_premium(plan, order_value)))
            calculation["premium"] = str(finalize(
                plan.amount(context, order_value, load_surcharge_policy())
            ))
            calculation["coverage_amount"] = str(finalize(coverage_amount(plan, order_value)))

        return Response({"success": True, "calculation": calculation})


class EvaluateView(views.APIView):
    """Cost breakdown for an order against the current rule snapshot."""

    def post(self, request):
        ser = OrderContextSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        snapshot, context = gate_snapshot(store.snapshot(), load_payment_flow(), ser.to_context())
        try:
            breakdown = evaluate(context, snapshot, surcharge_policy=load_surcharge_policy())
        except EvaluationError as exc:
            logger.warning("Evaluation rejected (%s): %s rules=%s", exc.code, exc, exc.rule_ids)
            return Response(exc.as_dict(), status=status.HTTP_422_UNPROCESSABLE_ENTITY)

        return Response(breakdown.to_dict(), status=status.HTTP_200_OK)
