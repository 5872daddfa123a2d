from django.contrib.auth import get_user_model
from django.test import TestCase

from .models import Order
from .utils import generate_order_id


class GenerateOrderIdTests(TestCase):
    def test_short_alphanumeric_and_unique(self):
        ids = {generate_order_id() for _ in range(50)}
        self.assertEqual(len(ids), 50)
        for oid in ids:
            self.assertLessEqual(len(oid), 20)
            self.assertTrue(oid.isalnum(), oid)

    def test_new_orders_await_payment(self):
        order = Order.objects.create(total=10)
        self.assertTrue(order.pk)
        self.assertEqual(order.status, Order.Status.PENDING_PAYMENT)
        self.assertFalse(order.is_paid)


class OrderOwnershipTests(TestCase):
    def test_owner_and_staff(self):
        User = get_user_model()
        owner = User.objects.create_user("jane")
        other = User.objects.create_user("john")
        staff = User.objects.create_user("admin", is_staff=True)
        order = Order.objects.create(user=owner, total=10)

        self.assertTrue(order.is_owned_by(owner))
        self.assertFalse(order.is_owned_by(other))
        self.assertTrue(order.is_owned_by(staff))
