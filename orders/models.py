from django.conf import settings
from django.db import models

from .utils import generate_order_id


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", "Pending payment"
        PENDING = "pending", "Pending"
        PAYMENT_FAILED = "payment_failed", "Payment failed"
        CANCELLED = "cancelled", "Cancelled"
        OUT_FOR_DELIVERY = "out_for_delivery", "Out for delivery"
        DELIVERED = "delivered", "Delivered"

    id = models.CharField(primary_key=True, max_length=64, default=generate_order_id, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        null=True,
        blank=True,
    )

    email = models.EmailField(blank=True, default="")
    delivery_name = models.CharField(max_length=128, blank=True, default="")
    delivery_phone = models.CharField(max_length=20, blank=True, default="")
    item_count = models.PositiveIntegerField(default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    status = models.CharField(
        max_length=32, choices=Status.choices, default=Status.PENDING_PAYMENT, db_index=True
    )

    # Written only by the payments app
    payment_status = models.CharField(max_length=32, blank=True, default="")
    payment_verified = models.BooleanField(default=False)
    payment_completed = models.BooleanField(default=False)
    payment_completed_at = models.DateTimeField(null=True, blank=True)
    gateway_transaction_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    payment_initiated = models.BooleanField(default=False)
    payment_initiated_at = models.DateTimeField(null=True, blank=True)
    payment_data = models.JSONField(blank=True, null=True)
    payment_updated_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    def is_owned_by(self, user) -> bool:
        return bool(user.is_staff or (self.user_id is not None and self.user_id == user.pk))

    def __str__(self):
        return f"{self.pk} ({self.status})"
