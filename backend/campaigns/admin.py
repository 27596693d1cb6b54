from django.contrib import admin
from .models import CampaignOrder


@admin.register(CampaignOrder)
class CampaignOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'company_name', 'service_name', 'package_name', 'total_amount', 'status', 'representative_name', 'created_at']
    list_filter = ['status', 'package_tier', 'service', 'created_at']
    search_fields = ['order_number', 'company_name', 'client_name', 'client_email', 'representative_name']
    ordering = ['-created_at']
    readonly_fields = ['order_number', 'service_name', 'package_name', 'package_tier', 'activities', 'total_amount', 'created_by', 'created_at', 'updated_at']

    fieldsets = (
        ('Order', {
            'fields': ('order_number', 'status', 'created_by')
        }),
        ('Client & Company', {
            'fields': ('company_name', 'website_url', 'client_name', 'client_email', 'client_phone',
                       'billing_address', 'city', 'state', 'country', 'zip_code')
        }),
        ('Representative', {
            'fields': ('representative_name', 'representative_email')
        }),
        ('Service Selection', {
            'fields': ('service', 'package', 'service_name', 'package_name', 'package_tier', 'activities', 'comments')
        }),
        ('Campaign', {
            'fields': ('campaign_start_date', 'campaign_duration', 'monthly_charges', 'total_amount')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )
