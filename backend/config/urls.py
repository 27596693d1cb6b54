"""
URL configuration for backend project.

The whole public API is the single GraphQL endpoint; the Django admin panel
stays available for operators.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Order Desk Admin Panel"
admin.site.site_title = "Order Desk Admin Portal"
admin.site.index_title = "Welcome to the Order Desk Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('backend.api.urls')),
]
