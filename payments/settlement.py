import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from orders.models import Order

from .exceptions import ConflictingState, UnknownOrder
from .itn import Outcome, SettlementOutcome

logger = logging.getLogger(__name__)

# Outcome -> (order status, payment status), applied only from pending_payment
TRANSITIONS = {
    Outcome.PAID: (Order.Status.PENDING, "paid"),
    Outcome.FAILED: (Order.Status.PAYMENT_FAILED, "failed"),
    Outcome.CANCELLED: (Order.Status.CANCELLED, "cancelled"),
}


@dataclass(frozen=True)
class SettlementResult:
    updated: bool
    previous_status: str
    new_status: str


def _unrecognized_status(outcome: SettlementOutcome) -> str:
    return (outcome.payment_status or "").lower()[:32]


def _changes_for(outcome: SettlementOutcome, now) -> dict:
    changes = {
        "payment_data": outcome.payload,
        "payment_updated_at": now,
        "updated_at": now,
    }
    if outcome.kind is Outcome.UNRECOGNIZED:
        # Status left alone; downstream decides what an unknown gateway status means
        changes["payment_status"] = _unrecognized_status(outcome)
        return changes

    new_status, payment_status = TRANSITIONS[outcome.kind]
    changes.update(status=new_status, payment_status=payment_status, payment_verified=True)
    if outcome.gateway_transaction_id:
        changes["gateway_transaction_id"] = outcome.gateway_transaction_id[:64]
    if outcome.kind is Outcome.PAID:
        changes.update(payment_completed=True, payment_completed_at=now)
    return changes


def _already_recorded(order, outcome: SettlementOutcome) -> bool:
    return (
        outcome.kind is Outcome.UNRECOGNIZED
        and order.payment_status == _unrecognized_status(outcome)
    )


def apply_settlement(outcome: SettlementOutcome) -> SettlementResult:
    """Move the order referenced by ``outcome`` to its settled status, at most once.

    The order row is locked for the read-modify-write and the write is
    conditional on the status still being ``pending_payment``, so concurrent
    or replayed notifications for one order settle it exactly once; the
    losers return ``updated=False``. A failure or cancellation arriving
    after the order was paid raises :class:`ConflictingState`.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=outcome.order_ref).first()
        if order is None:
            raise UnknownOrder(outcome.order_ref)

        previous = order.status
        if previous == Order.Status.PENDING_PAYMENT and _already_recorded(order, outcome):
            logger.info(
                "Replayed %s notification for order %s; payment status already recorded",
                outcome.payment_status,
                order.pk,
            )
            return SettlementResult(updated=False, previous_status=previous, new_status=previous)

        if previous == Order.Status.PENDING_PAYMENT:
            changes = _changes_for(outcome, timezone.now())
            written = Order.objects.filter(
                pk=order.pk, status=Order.Status.PENDING_PAYMENT
            ).update(**changes)
            if written:
                new_status = changes.get("status", previous)
                logger.info(
                    "Order %s settled: %s -> %s (payment_status=%s, pf_payment_id=%s)",
                    order.pk,
                    previous,
                    new_status,
                    changes["payment_status"],
                    outcome.gateway_transaction_id,
                )
                return SettlementResult(updated=True, previous_status=previous, new_status=new_status)
            # Another writer got there first
            order.refresh_from_db(fields=["status", "payment_status", "gateway_transaction_id"])
            previous = order.status

        if previous == Order.Status.PENDING and outcome.kind in (Outcome.FAILED, Outcome.CANCELLED):
            logger.warning(
                "Order %s is already paid; ignoring %s notification pf_payment_id=%s",
                order.pk,
                outcome.payment_status,
                outcome.gateway_transaction_id,
            )
            raise ConflictingState(f"Order {order.pk} is {previous}; cannot apply {outcome.kind.value}")

        if (
            outcome.kind is Outcome.PAID
            and outcome.gateway_transaction_id
            and order.gateway_transaction_id
            and outcome.gateway_transaction_id != order.gateway_transaction_id
        ):
            logger.warning(
                "Order %s already settled by pf_payment_id=%s; replay carries pf_payment_id=%s",
                order.pk,
                order.gateway_transaction_id,
                outcome.gateway_transaction_id,
            )
        else:
            logger.info(
                "Replayed %s notification for order %s in status %s; nothing to do",
                outcome.payment_status,
                order.pk,
                previous,
            )
        return SettlementResult(updated=False, previous_status=previous, new_status=previous)
