from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.test import TestCase

from orders.models import Order

from .exceptions import ConflictingState, UnknownOrder
from .itn import Outcome, SettlementOutcome
from .settlement import apply_settlement


def outcome(kind, order_ref="abc123", pf_payment_id="1089250", status=None):
    statuses = {
        Outcome.PAID: "COMPLETE",
        Outcome.FAILED: "FAILED",
        Outcome.CANCELLED: "CANCELLED",
        Outcome.UNRECOGNIZED: "PENDING",
    }
    return SettlementOutcome(
        kind=kind,
        order_ref=order_ref,
        gateway_transaction_id=pf_payment_id,
        payment_status=status or statuses[kind],
        payload={"m_payment_id": order_ref, "payment_status": status or statuses[kind]},
    )


class ApplySettlementTests(TestCase):
    def setUp(self):
        self.order = Order.objects.create(id="abc123", total=Decimal("150.00"), email="jane@example.com")

    def test_paid(self):
        result = apply_settlement(outcome(Outcome.PAID))

        self.assertTrue(result.updated)
        self.assertEqual(result.previous_status, "pending_payment")
        self.assertEqual(result.new_status, "pending")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "paid")
        self.assertTrue(self.order.payment_completed)
        self.assertTrue(self.order.payment_verified)
        self.assertIsNotNone(self.order.payment_completed_at)
        self.assertEqual(self.order.gateway_transaction_id, "1089250")
        self.assertEqual(self.order.payment_data["payment_status"], "COMPLETE")

    def test_paid_twice_is_a_no_op(self):
        apply_settlement(outcome(Outcome.PAID))
        self.order.refresh_from_db()
        completed_at = self.order.payment_completed_at
        updated_at = self.order.updated_at

        result = apply_settlement(outcome(Outcome.PAID))

        self.assertFalse(result.updated)
        self.assertEqual(result.previous_status, "pending")
        self.assertEqual(result.new_status, "pending")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_completed_at, completed_at)
        self.assertEqual(self.order.updated_at, updated_at)

    def test_replay_with_other_transaction_id_is_logged(self):
        apply_settlement(outcome(Outcome.PAID))
        with self.assertLogs("payments.settlement", level="WARNING"):
            result = apply_settlement(outcome(Outcome.PAID, pf_payment_id="999"))
        self.assertFalse(result.updated)
        self.order.refresh_from_db()
        self.assertEqual(self.order.gateway_transaction_id, "1089250")

    def test_failed(self):
        result = apply_settlement(outcome(Outcome.FAILED))
        self.assertEqual(result.new_status, "payment_failed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, "failed")
        self.assertFalse(self.order.payment_completed)
        self.assertIsNone(self.order.payment_completed_at)

    def test_cancelled(self):
        result = apply_settlement(outcome(Outcome.CANCELLED))
        self.assertEqual(result.new_status, "cancelled")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, "cancelled")

    def test_failure_after_payment_conflicts(self):
        apply_settlement(outcome(Outcome.PAID))
        for kind in (Outcome.FAILED, Outcome.CANCELLED):
            with self.assertRaises(ConflictingState):
                apply_settlement(outcome(kind))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "paid")

    def test_terminal_statuses_are_left_alone(self):
        for status in ("payment_failed", "cancelled", "delivered"):
            Order.objects.filter(pk="abc123").update(status=status, payment_status="")
            for kind in (Outcome.PAID, Outcome.FAILED, Outcome.CANCELLED):
                result = apply_settlement(outcome(kind))
                self.assertFalse(result.updated)
                self.assertEqual(result.new_status, status)
            self.order.refresh_from_db()
            self.assertEqual(self.order.status, status)
            self.assertEqual(self.order.payment_status, "")

    def test_unrecognized_status_passes_through(self):
        result = apply_settlement(outcome(Outcome.UNRECOGNIZED, status="PENDING"))
        self.assertTrue(result.updated)
        self.assertEqual(result.new_status, "pending_payment")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending_payment")
        self.assertEqual(self.order.payment_status, "pending")

        # The order can still settle afterwards
        self.assertEqual(apply_settlement(outcome(Outcome.PAID)).new_status, "pending")

    def test_unknown_order(self):
        with self.assertRaises(UnknownOrder):
            apply_settlement(outcome(Outcome.PAID, order_ref="missing"))

    def test_unrecognized_replay_writes_nothing(self):
        apply_settlement(outcome(Outcome.UNRECOGNIZED, status="PENDING"))
        self.order.refresh_from_db()
        recorded_at, updated_at = self.order.payment_updated_at, self.order.updated_at

        result = apply_settlement(outcome(Outcome.UNRECOGNIZED, status="PENDING"))

        self.assertFalse(result.updated)
        self.assertEqual(result.new_status, "pending_payment")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_updated_at, recorded_at)
        self.assertEqual(self.order.updated_at, updated_at)


class ConcurrentSettlementTests(TestCase):
    """The locked read saw pending_payment but another writer settled the order first."""

    def setUp(self):
        Order.objects.create(id="abc123", total=Decimal("150.00"))
        self.stale = Order.objects.get(pk="abc123")
        apply_settlement(outcome(Outcome.PAID))

    def _locked_read_returns_stale_row(self):
        queryset = MagicMock()
        queryset.filter.return_value.first.return_value = self.stale
        return patch.object(Order.objects, "select_for_update", return_value=queryset)

    def test_losing_paid_notification_backs_off(self):
        with self._locked_read_returns_stale_row():
            result = apply_settlement(outcome(Outcome.PAID, pf_payment_id="2000000"))

        self.assertFalse(result.updated)
        self.assertEqual(result.previous_status, "pending")
        self.assertEqual(result.new_status, "pending")
        order = Order.objects.get(pk="abc123")
        self.assertEqual(order.gateway_transaction_id, "1089250")

    def test_losing_failed_notification_conflicts(self):
        with self._locked_read_returns_stale_row():
            with self.assertRaises(ConflictingState):
                apply_settlement(outcome(Outcome.FAILED))

        order = Order.objects.get(pk="abc123")
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.payment_status, "paid")
