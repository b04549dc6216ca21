import enum
import logging
import threading

from broker.config import RABBITMQ_CONNECT_DELAY, UPDATE_STOCK_QUEUE
from broker.models import StockAdjustmentMessage
from broker.setup import declare_stock_queue

logger = logging.getLogger(__name__)


class MissingProductPolicy(str, enum.Enum):
    SKIP = "skip"
    ABORT = "abort"


class MissingProduct(Exception):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} does not exist")
        self.product_id = product_id


class StockAdjustmentConsumer:
    """Applies queued stock deltas to the inventory store, one message at a time.

    Runs on its own thread for the life of the inventory service. Messages are
    acked only after every delta is applied; anything else is nacked without
    requeue and is gone (there is no dead-letter queue). Deltas are committed
    one by one, so a failure halfway through a message leaves the earlier
    ones applied.
    """

    def __init__(self, broker, store, policy=MissingProductPolicy.SKIP, queue: str = UPDATE_STOCK_QUEUE,
                 reconnect_delay: float = RABBITMQ_CONNECT_DELAY):
        self.broker = broker
        self.store = store
        self.policy = MissingProductPolicy(policy)
        self.queue = queue
        self.reconnect_delay = reconnect_delay
        self.channel = None
        self._stopped = threading.Event()

    # ── Lifecycle ─────────────────────────────────────────────────────
    def run(self) -> None:
        """Thread entry point: owns the broker connection from open to close.

        A lost connection, or a broker that stays down past the connect
        retries, is logged and retried after ``reconnect_delay`` until
        :meth:`stop` is called. Returns once consuming ends normally.
        """
        while not self._stopped.is_set():
            try:
                if not self.broker.is_open:
                    self.broker.connect()
                self.start()
                return
            except Exception:
                logger.exception("Stock worker lost its broker connection; reconnecting in %ss",
                                 self.reconnect_delay)
            finally:
                self.broker.close()
            self._stopped.wait(self.reconnect_delay)

    def start(self) -> None:
        self.channel = self.broker.open_channel()
        try:
            declare_stock_queue(self.channel, self.queue)
            self.channel.basic_qos(prefetch_count=1)
            self.channel.basic_consume(
                queue=self.queue,
                on_message_callback=self._on_delivery,
                auto_ack=False,
            )
            logger.info("Stock worker listening on '%s' (prefetch=1, missing products: %s)",
                        self.queue, self.policy.value)
            if not self._stopped.is_set():
                self.channel.start_consuming()
        finally:
            if self.channel.is_open:
                self.channel.close()
            logger.info("Stock worker stopped")

    def stop(self) -> None:
        self._stopped.set()
        if self.channel is not None and self.broker.is_open:
            # start_consuming blocks the worker thread; ask it to return from there.
            self.broker.add_callback_threadsafe(self.channel.stop_consuming)

    # ── Message handling ─────────────────────────────────────────────
    def _on_delivery(self, ch, method, properties, body):
        self.on_message(ch, method.delivery_tag, body)

    def on_message(self, channel, delivery_tag, body: bytes) -> None:
        try:
            message = StockAdjustmentMessage.from_json(body)
        except ValueError as e:
            # Bad UTF-8, bad JSON or the wrong shape; pydantic errors are ValueErrors too.
            logger.error("MALFORMED stock adjustment dropped | error: %s | body: %r", e, body[:200])
            channel.basic_nack(delivery_tag=delivery_tag, requeue=False)
            return

        if not message.items:
            logger.info("Stock adjustment %s has no items, ACK (no-op)", message.correlation_id)
            channel.basic_ack(delivery_tag=delivery_tag)
            return

        applied = 0
        try:
            for item in message.items:
                if self.apply(item.product_id, item.quantity):
                    applied += 1
        except Exception:
            logger.exception(
                "Stock adjustment %s failed after %d of %d item(s) were applied; dropped without requeue",
                message.correlation_id, applied, len(message.items),
            )
            channel.basic_nack(delivery_tag=delivery_tag, requeue=False)
            return

        channel.basic_ack(delivery_tag=delivery_tag)
        logger.info("Stock updated for %s | %d of %d item(s) applied",
                    message.correlation_id, applied, len(message.items))

    def apply(self, product_id: int, delta: int) -> bool:
        if self.store.adjust_quantity(product_id, delta):
            return True
        if self.policy is MissingProductPolicy.ABORT:
            raise MissingProduct(product_id)
        logger.warning("Product %s not found, skipping delta %+d", product_id, delta)
        return False
