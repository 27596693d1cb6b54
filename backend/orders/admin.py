from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_no', 'user', 'status', 'amount', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_no', 'user__email', 'user__name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['user']
