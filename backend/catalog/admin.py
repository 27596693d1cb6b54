from django.contrib import admin
from .models import Service, Package, Activity


class PackageInline(admin.TabularInline):
    model = Package
    extra = 0
    fields = ['name', 'tier', 'price']


class ActivityInline(admin.TabularInline):
    model = Activity
    extra = 0
    fields = ['name', 'description']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['name', 'icon', 'package_count', 'created_at']
    search_fields = ['name', 'description']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [PackageInline]

    def package_count(self, obj):
        return obj.packages.count()
    package_count.short_description = 'Packages'


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'service', 'tier', 'price', 'created_at']
    list_filter = ['tier', 'service']
    search_fields = ['name', 'description', 'service__name']
    ordering = ['service', 'price']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ActivityInline]


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['name', 'package', 'created_at']
    list_filter = ['package__service']
    search_fields = ['name', 'description', 'package__name']
    ordering = ['package', 'name']
