"""Payment webhook processing: command and handler.

Applies verified processor notifications to the correlated order, found by
the orderId metadata or else by payment intent id. The processor retries
anything that is not acknowledged, so notifications that cannot be applied
are logged and acknowledged rather than failed.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"

_STATUS_FOR_EVENT = {
    PAYMENT_SUCCEEDED: OrderStatus.PROCESSING,
    PAYMENT_FAILED: OrderStatus.CANCELLED,
}


@storefront.command(part_of="Order")
class ProcessPaymentWebhook:
    """Apply a verified payment processor notification."""

    event_id = String(max_length=255)
    event_type = String(required=True, max_length=100)
    payment_intent_id = String(max_length=255)
    order_id = Identifier()  # From the intent's orderId metadata


@storefront.command_handler(part_of=Order)
class ProcessWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        log = logger.bind(event_id=command.event_id, event_type=command.event_type)

        new_status = _STATUS_FOR_EVENT.get(command.event_type)
        if new_status is None:
            log.info("webhook_event_ignored")
            return None

        repo = current_domain.repository_for(Order)
        order = self._find_order(repo, command)
        if order is None:
            log.warning(
                "webhook_order_not_found",
                order_id=command.order_id,
                payment_intent_id=command.payment_intent_id,
            )
            return None

        if order.status == new_status.value:
            log.info("webhook_already_applied", order_id=str(order.id), status=order.status)
            return str(order.id)

        if not order.can_transition_to(new_status):
            log.warning(
                "webhook_transition_skipped",
                order_id=str(order.id),
                current_status=order.status,
                requested_status=new_status.value,
            )
            return None

        order.change_status(new_status.value)
        repo.add(order)
        log.info("webhook_order_updated", order_id=str(order.id), status=order.status)
        return str(order.id)

    @staticmethod
    def _find_order(repo, command):
        """Correlate by the orderId metadata, falling back to the intent the order was paid with."""
        if command.order_id:
            try:
                return repo.get(command.order_id)
            except ObjectNotFoundError:
                logger.info("webhook_order_id_unknown", order_id=command.order_id)
        if command.payment_intent_id:
            return repo.find_by_payment_intent(command.payment_intent_id)
        return None
