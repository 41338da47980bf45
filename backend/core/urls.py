from django.urls import path

from .views import PaymentFlowSettingsView

urlpatterns = [
    path('payment-flow/', PaymentFlowSettingsView.as_view(), name='payment-flow-settings'),
]
