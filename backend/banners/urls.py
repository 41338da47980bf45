from django.urls import path
from rest_framework.routers import SimpleRouter

from .views import ActiveBannersView, PromotionalBannerViewSet

router = SimpleRouter()
router.register(r'admin/banners', PromotionalBannerViewSet, basename='admin-banners')

urlpatterns = [
    path('banners/active/', ActiveBannersView.as_view(), name='banners-active'),
]
urlpatterns += router.urls
