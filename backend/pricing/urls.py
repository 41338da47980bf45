from django.urls import path
from rest_framework.routers import SimpleRouter

from .views import (
    EvaluateView,
    OrderChargeViewSet,
    ShippingInsuranceViewSet,
    TaxConfigurationViewSet,
)

router = SimpleRouter()
router.register(r'admin/taxes', TaxConfigurationViewSet, basename='admin-taxes')
router.register(r'admin/charges', OrderChargeViewSet, basename='admin-charges')
router.register(r'admin/insurance', ShippingInsuranceViewSet, basename='admin-insurance')

urlpatterns = [
    path('pricing/evaluate/', EvaluateView.as_view(), name='pricing-evaluate'),
]
urlpatterns += router.urls
