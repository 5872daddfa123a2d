from django.db import models


class PaymentNotification(models.Model):
    """One row per ITN received, trusted or not. Rows are never changed or removed."""

    order_ref = models.CharField(max_length=100, blank=True, default="", db_index=True)
    payment_status = models.CharField(max_length=32, blank=True, default="")
    gateway_transaction_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    payload = models.JSONField(default=dict, blank=True)
    raw_body = models.TextField(blank=True, default="")
    source_ip = models.GenericIPAddressField(null=True, blank=True)
    verified = models.BooleanField(default=False)
    rejection_reason = models.CharField(max_length=64, blank=True, default="")
    environment = models.CharField(max_length=16, blank=True, default="")
    received_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ("-received_at",)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payment notifications are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Payment notifications are append-only")

    def __str__(self):
        state = "verified" if self.verified else (self.rejection_reason or "unverified")
        return f"{self.order_ref or '?'} {self.payment_status} ({state})"
