from django.contrib import admin

from .models import PaymentNotification


@admin.register(PaymentNotification)
class PaymentNotificationAdmin(admin.ModelAdmin):
    list_display = ("received_at", "order_ref", "payment_status", "verified", "rejection_reason", "source_ip", "environment")
    search_fields = ("order_ref", "gateway_transaction_id", "source_ip")
    list_filter = ("verified", "rejection_reason", "environment", "received_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
