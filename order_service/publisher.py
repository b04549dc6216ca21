import logging

import pika

from broker.config import UPDATE_STOCK_QUEUE
from broker.models import StockAdjustmentMessage
from broker.setup import declare_stock_queue

logger = logging.getLogger(__name__)


class StockAdjustmentPublisher:
    def __init__(self, broker, queue: str = UPDATE_STOCK_QUEUE):
        self.broker = broker
        self.queue = queue

    def publish(self, message: StockAdjustmentMessage) -> bool:
        """
        Send a stock adjustment to the inventory worker.

        Persistent delivery on a durable queue, with publisher confirms and
        ``mandatory=True`` so an unroutable message raises instead of being
        dropped by the broker.

        Returns:
            True if the broker confirmed the message, False otherwise. Errors
            are logged here and never raised to the caller.
        """
        body = message.to_json()
        try:
            with self.broker.channel() as channel:
                channel.confirm_delivery()
                declare_stock_queue(channel, self.queue)
                channel.basic_publish(
                    exchange="",
                    routing_key=self.queue,
                    body=body,
                    properties=pika.BasicProperties(
                        delivery_mode=2,
                        content_type="application/json",
                        message_id=str(message.correlation_id),
                        correlation_id=str(message.correlation_id),
                    ),
                    mandatory=True,
                )
        except pika.exceptions.UnroutableError:
            logger.error("Stock adjustment %s was unroutable on '%s'", message.correlation_id, self.queue)
            return False
        except pika.exceptions.AMQPError as e:
            logger.error("RabbitMQ error publishing stock adjustment %s: %r", message.correlation_id, e)
            return False
        except Exception:
            logger.exception("Error publishing stock adjustment %s", message.correlation_id)
            return False

        logger.info(
            "Published stock adjustment %s | %d item(s) -> '%s'",
            message.correlation_id,
            len(message.items or []),
            self.queue,
        )
        return True
