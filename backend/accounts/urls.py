from django.urls import path
from . import views

urlpatterns = [
    path('login/', views.login_view, name='admin-login'),
    path('logout/', views.logout_view, name='admin-logout'),
    path('check/', views.check_view, name='admin-check'),
    path('refresh/', views.refresh_view, name='admin-refresh'),
]
