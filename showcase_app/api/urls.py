"""URLs of the project showcase API"""
from django.urls import path
from showcase_app.api.views import (
    ActiveConnectionsView,
    ConnectionDetailView,
    ConnectionFeatureView,
    ConnectionStatusView,
    FeaturedConnectionsView,
    OwnedConnectionsView,
    WebsiteConnectionListCreateView,
)


urlpatterns = [
    path('connections/', WebsiteConnectionListCreateView.as_view(), name='connection-list'),
    path('connections/active/', ActiveConnectionsView.as_view(), name='connection-active'),
    path('connections/featured/', FeaturedConnectionsView.as_view(), name='connection-featured'),
    path('connections/owned/', OwnedConnectionsView.as_view(), name='connection-owned'),
    path('connections/<int:pk>/', ConnectionDetailView.as_view(), name='connection-detail'),
    path('connections/<int:pk>/status/', ConnectionStatusView.as_view(), name='connection-status'),
    path('connections/<int:pk>/feature/', ConnectionFeatureView.as_view(), name='connection-feature'),
]
