from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/admin/auth/', include('accounts.urls')),
    path('api/admin/settings/', include('core.urls')),
    path('api/admin/audit-logs/', include('audit.urls')),
    path('api/', include('banners.urls')),
    path('api/', include('carts.urls')),
    path('api/', include('pricing.urls')),
]
