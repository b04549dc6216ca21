import logging
import threading
import time
from contextlib import contextmanager

import pika

from broker.config import RABBITMQ_CONNECT_DELAY, RABBITMQ_CONNECT_RETRIES, RABBITMQ_URL

logger = logging.getLogger(__name__)


class BrokerConnection:
    """Process-wide RabbitMQ connection, created at service startup and closed at shutdown.

    Publishers borrow a short-lived channel per message through :meth:`channel`;
    the stock worker holds one channel for its whole lifetime. A blocking pika
    connection must not be used from two threads at once, so channel use is
    serialised with a lock.

    An idle blocking connection only answers heartbeats when pika gets to run
    its I/O loop, so the broker may drop it between publishes. :meth:`channel`
    pumps pending events first and opens a fresh connection if the old one is
    gone.
    """

    def __init__(self, url: str = RABBITMQ_URL):
        self.url = url
        self.connection = None
        self._lock = threading.RLock()

    def connect(self, retries: int = RABBITMQ_CONNECT_RETRIES, delay: float = RABBITMQ_CONNECT_DELAY):
        params = pika.URLParameters(self.url)
        for attempt in range(1, retries + 1):
            try:
                self.connection = pika.BlockingConnection(params)
                logger.info("Connected to RabbitMQ at %s", params.host)
                return self
            except pika.exceptions.AMQPConnectionError:
                logger.warning("RabbitMQ not ready, retry %d/%d", attempt, retries)
                time.sleep(delay)
        raise RuntimeError("Cannot connect to RabbitMQ")

    def reconnect(self):
        """One connection attempt, used when a dropped connection is found mid-run."""
        logger.warning("RabbitMQ connection lost, reconnecting to %s", pika.URLParameters(self.url).host)
        return self.connect(retries=1, delay=0)

    @property
    def is_open(self) -> bool:
        return self.connection is not None and self.connection.is_open

    @contextmanager
    def channel(self):
        with self._lock:
            channel = self._fresh_channel()
            try:
                yield channel
            finally:
                if channel.is_open:
                    channel.close()

    def _fresh_channel(self):
        if not self.is_open:
            self.reconnect()
            return self.connection.channel()
        try:
            # Services heartbeats and surfaces a connection the broker already dropped.
            self.connection.process_data_events(time_limit=0)
            return self.connection.channel()
        except pika.exceptions.AMQPConnectionError:
            self.reconnect()
            return self.connection.channel()

    def open_channel(self):
        """Open a channel owned by the caller (the stock worker keeps one for its lifetime)."""
        if not self.is_open:
            raise pika.exceptions.ConnectionWrongStateError("Broker connection is not open")
        return self.connection.channel()

    def add_callback_threadsafe(self, callback) -> None:
        self.connection.add_callback_threadsafe(callback)

    def close(self) -> None:
        if self.is_open:
            try:
                self.connection.close()
            except pika.exceptions.AMQPError as e:
                logger.warning("RabbitMQ connection did not close cleanly: %r", e)
                return
            logger.info("RabbitMQ connection closed")
