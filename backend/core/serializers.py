from rest_framework import serializers

from core.services.payment_flow import DEFAULT_TYPES, FLOW_TYPES


class PaymentFlowSerializer(serializers.Serializer):
    flow_type = serializers.ChoiceField(choices=FLOW_TYPES, required=False)
    default_type = serializers.ChoiceField(choices=DEFAULT_TYPES, required=False)
    cod_enabled = serializers.BooleanField(required=False)
    online_payment_enabled = serializers.BooleanField(required=False)

