from rest_framework.routers import SimpleRouter

from .views import AbandonedCartViewSet

router = SimpleRouter()
router.register(r'admin/abandoned-carts', AbandonedCartViewSet, basename='admin-abandoned-carts')

urlpatterns = router.urls
