import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from orders.models import Order

from .builder import build_payment_request
from .config import get_config
from .emails import send_order_status_email
from .exceptions import ConfigurationError, ConflictingState, UnknownOrder, ValidationError
from .itn import NotificationProcessor, Rejection
from .settlement import apply_settlement
from .utils import get_client_ip

logger = logging.getLogger(__name__)


def _text(message: str, status: int = 200) -> HttpResponse:
    return HttpResponse(message, status=status, content_type="text/plain")


def _owned_order_or_error(request, order_id):
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return None, JsonResponse({"error": "Order not found"}, status=404)
    if not order.is_owned_by(request.user):
        logger.warning("User %s is not allowed to access order %s", request.user.pk, order_id)
        return None, JsonResponse({"error": "Not authorized for this order"}, status=403)
    return order, None


@csrf_exempt
@require_POST
@login_required
def payfast_process_view(request, order_id: str):
    """Return the signed PayFast form for one of the caller's orders."""
    order, error = _owned_order_or_error(request, order_id)
    if error:
        return error
    if order.status != Order.Status.PENDING_PAYMENT:
        return JsonResponse({"error": f"Order is {order.status}, not awaiting payment"}, status=409)

    try:
        config = get_config()
        descriptor = build_payment_request(config, order, order.pk, str(request.user.pk))
    except ConfigurationError as e:
        logger.error("PayFast is not configured: %s", e)
        return JsonResponse({"error": str(e)}, status=500)
    except ValidationError as e:
        return JsonResponse({"error": str(e)}, status=400)

    order.payment_initiated = True
    order.payment_initiated_at = timezone.now()
    order.save(update_fields=["payment_initiated", "payment_initiated_at", "updated_at"])
    logger.info("Payment initiated for order %s by user %s", order.pk, request.user.pk)

    return JsonResponse(descriptor.as_dict())


@csrf_exempt
@require_POST
def payfast_notify_view(request):
    """PayFast ITN endpoint. Trust comes from the processor's checks, not from auth."""
    source_ip = get_client_ip(request)
    try:
        config = get_config()
    except ConfigurationError:
        logger.exception("PayFast ITN received but merchant credentials are not configured")
        return _text("Server error processing ITN", status=500)

    try:
        result = NotificationProcessor(config).process(request.body, source_ip)
        if not result.ok:
            return _text(result.rejection.reason, status=result.rejection.http_status)

        try:
            settled = apply_settlement(result.outcome)
        except ConflictingState as e:
            logger.error("PayFast ITN conflicts with stored order state: %s", e)
            return _text(Rejection.CONFLICTING_STATE.reason, status=Rejection.CONFLICTING_STATE.http_status)
        except UnknownOrder:
            return _text(Rejection.UNKNOWN_ORDER.reason, status=Rejection.UNKNOWN_ORDER.http_status)

        if settled.updated and settled.new_status != settled.previous_status:
            _send_status_email(result.outcome.order_ref)

        return _text("ITN processed successfully")
    except Exception:
        logger.exception("Error handling PayFast ITN from %s", source_ip)
        return _text("Server error processing ITN", status=500)


def _send_status_email(order_id):
    # A notification failure must not change the answer PayFast gets
    try:
        order = Order.objects.get(pk=order_id)
        send_order_status_email(order=order)
    except Exception:
        logger.exception("Could not send payment status email for order %s", order_id)


@require_GET
@login_required
def payment_status_view(request, order_id: str):
    order, error = _owned_order_or_error(request, order_id)
    if error:
        return error
    return JsonResponse(
        {
            "orderId": order.pk,
            "status": order.status,
            "paymentStatus": order.payment_status or "unknown",
            "paymentCompleted": order.payment_completed,
            "gatewayTransactionId": order.gateway_transaction_id or None,
        }
    )
