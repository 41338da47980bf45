from __future__ import annotations

from rest_framework import status, views
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from audit.services import audit_service
from core.serializers import PaymentFlowSerializer
from core.services.payment_flow import load_payment_flow, save_payment_flow


class PaymentFlowSettingsView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response({"success": True, "data": load_payment_flow().to_dict()})

    def put(self, request):
        ser = PaymentFlowSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        current = load_payment_flow()
        merged = {**current.to_dict(), **ser.validated_data}
        if not merged["cod_enabled"] and not merged["online_payment_enabled"]:
            return Response(
                {"detail": "At least one payment channel must stay enabled."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        old, new = save_payment_flow(ser.validated_data)
        audit_service.log_config_change("payment_flow", old.to_dict(), new.to_dict(), request=request)
        return Response({
            "success": True,
            "message": "Payment flow settings updated successfully",
            "data": new.to_dict(),
        })
