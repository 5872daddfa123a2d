from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "status", "payment_status", "total", "email", "created_at", "updated_at")
    search_fields = ("id", "email", "delivery_name", "gateway_transaction_id")
    list_filter = ("status", "payment_status", "payment_completed", "created_at")
    readonly_fields = (
        "payment_status",
        "payment_verified",
        "payment_completed",
        "payment_completed_at",
        "gateway_transaction_id",
        "payment_initiated",
        "payment_initiated_at",
        "payment_data",
        "payment_updated_at",
        "created_at",
        "updated_at",
    )
