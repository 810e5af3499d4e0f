"""Contains all necessary URLs for the auth_app API"""
from django.urls import path
from auth_app.api.views import (
    AdminUserListView,
    AdminUserRolesView,
    LoginView,
    LogoutView,
    MeView,
    RegisterView,
    TokenRefreshView,
    VerificationConfirmView,
    VerificationRequestView,
)


urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='api-login'),
    path('logout/', LogoutView.as_view(), name='api-logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='api-token-refresh'),
    path('me/', MeView.as_view(), name='api-me'),
    path('verification/<str:kind>/request/', VerificationRequestView.as_view(), name='verification-request'),
    path('verification/<str:kind>/verify/', VerificationConfirmView.as_view(), name='verification-verify'),
    path('admin/users/', AdminUserListView.as_view(), name='admin-user-list'),
    path('admin/users/<int:pk>/roles/', AdminUserRolesView.as_view(), name='admin-user-roles'),
]
