"""Order creation and cancellation across the order and inventory services.

The two services share no transaction. Creating an order checks stock over
HTTP, publishes a decrement to ``update_stock_queue`` and then writes the
order locally; cancelling publishes the mirror-image restore and then
soft-deletes the order. Publish failures are logged and do not fail the
request, and a local write failure after a successful publish leaves a
decrement on the queue for an order that does not exist. Both windows are
logged with the message's correlation id so the drift can be reconciled.

Two cancellations of the same order can both read it before either writes,
so both publish a restore and stock is returned twice. The one that loses
the write reports the order as not found.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from broker.models import StockAdjustmentMessage
from order_service.domain import Order, OrderItem, OrderLine
from order_service.outcome import Outcome
from order_service.stock_client import ProductNotFound, StockServiceUnavailable

logger = logging.getLogger(__name__)


def validate_request(customer_id: int, lines: Sequence[OrderLine]) -> List[str]:
    errors = []
    if customer_id is None or customer_id <= 0:
        errors.append("customer_id is required and must be greater than zero")
    if not lines:
        errors.append("an order must contain at least one item")
    for line in lines or []:
        if line.product_id is None or line.product_id <= 0:
            errors.append("product_id is required and must be greater than zero")
        if line.quantity is None or line.quantity <= 0:
            errors.append("quantity must be greater than zero")
    return errors


class OrderWorkflow:
    def __init__(self, store, stock_client, publisher):
        self.store = store
        self.stock_client = stock_client
        self.publisher = publisher

    def create_order(
        self, customer_id: int, lines: Sequence[OrderLine], authorization: Optional[str] = None
    ) -> Outcome:
        errors = validate_request(customer_id, lines)
        if errors:
            return Outcome.invalid(errors)

        # One line at a time, in request order: the first failing line decides the outcome.
        items = []
        for line in lines:
            try:
                product = self.stock_client.fetch_product(line.product_id, authorization=authorization)
            except StockServiceUnavailable:
                return Outcome.unavailable(line.product_id)
            except ProductNotFound:
                return Outcome.not_found(f"Product {line.product_id} not found", product_id=line.product_id)

            if product.stock_quantity < line.quantity:
                logger.info(
                    "Rejecting order for customer %s: product %s has %s, %s requested",
                    customer_id, line.product_id, product.stock_quantity, line.quantity,
                )
                return Outcome.conflict(line.product_id, product.name, product.stock_quantity, line.quantity)

            items.append(
                OrderItem(
                    product_id=line.product_id,
                    product_name=product.name,
                    unit_price=product.price,
                    quantity=line.quantity,
                )
            )

        order = Order.confirmed(customer_id, items)
        message = StockAdjustmentMessage.decrement(order.items)
        if not self.publisher.publish(message):
            logger.warning(
                "Stock decrement %s not published; order for customer %s is saved anyway "
                "and inventory will not reflect it",
                message.correlation_id, customer_id,
            )

        try:
            self.store.add(order)
        except sqlite3.Error:
            logger.exception(
                "Could not persist order for customer %s; stock decrement %s may already be queued",
                customer_id, message.correlation_id,
            )
            return Outcome.internal("The order could not be saved. Try again later.")

        logger.info(
            "Order %s confirmed | customer=%s total=%s correlation_id=%s",
            order.id, customer_id, order.total, message.correlation_id,
        )
        return Outcome.success(order)

    def get_order(self, order_id: int) -> Outcome:
        order = self.store.get(order_id)
        if order is None:
            return Outcome.not_found(f"Order {order_id} not found")
        return Outcome.success(order)

    def cancel_order(self, order_id: int) -> Outcome:
        order = self.store.get(order_id)
        if order is None:
            return Outcome.not_found(f"Order {order_id} not found")

        message = StockAdjustmentMessage.restore(order.live_items())
        if not self.publisher.publish(message):
            logger.warning(
                "Stock restore %s for order %s not published; cancelling anyway, "
                "inventory stays decremented",
                message.correlation_id, order_id,
            )

        order.cancel(datetime.now(timezone.utc))
        try:
            saved = self.store.mark_cancelled(order)
        except sqlite3.Error:
            logger.exception(
                "Could not persist cancellation of order %s; stock restore %s may already be queued",
                order_id, message.correlation_id,
            )
            return Outcome.internal("The order could not be cancelled. Try again later.")

        if not saved:
            # Another cancellation got there first; its restore and this one are both queued.
            logger.error(
                "Order %s was cancelled concurrently; stock restore %s is a duplicate",
                order_id, message.correlation_id,
            )
            return Outcome.not_found(f"Order {order_id} not found")

        logger.info("Order %s cancelled | correlation_id=%s", order_id, message.correlation_id)
        return Outcome.success(order)
