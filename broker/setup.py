import logging

from broker.config import RABBITMQ_URL, UPDATE_STOCK_QUEUE
from broker.connection import BrokerConnection
from common.log import configure_logging

logger = logging.getLogger(__name__)


def declare_stock_queue(channel, queue: str = UPDATE_STOCK_QUEUE) -> None:
    # Same arguments on both sides; RabbitMQ rejects a redeclare with different ones.
    channel.queue_declare(
        queue=queue, durable=True, exclusive=False, auto_delete=False
    )


def setup_infrastructure(url: str = RABBITMQ_URL) -> None:
    broker = BrokerConnection(url).connect()
    try:
        with broker.channel() as channel:
            declare_stock_queue(channel)
        logger.info("Queue '%s' declared (durable)", UPDATE_STOCK_QUEUE)
    finally:
        broker.close()


if __name__ == "__main__":
    configure_logging("setup")
    setup_infrastructure()
