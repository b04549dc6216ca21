from contextlib import contextmanager
from decimal import Decimal

from order_service.stock_client import ProductInfo, ProductNotFound


class FakeChannel:
    """Records what the code under test asks of a pika channel."""

    def __init__(self):
        self.is_open = True
        self.acks = []
        self.nacks = []
        self.published = []
        self.declared = []
        self.qos = None
        self.consumers = []
        self.confirms = False
        self.consuming = False
        self.publish_error = None

    def queue_declare(self, queue, **kwargs):
        self.declared.append((queue, kwargs))

    def confirm_delivery(self):
        self.confirms = True

    def basic_publish(self, **kwargs):
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append(kwargs)

    def basic_qos(self, prefetch_count=0, **kwargs):
        self.qos = prefetch_count

    def basic_consume(self, queue, on_message_callback, auto_ack=False):
        self.consumers.append({"queue": queue, "callback": on_message_callback, "auto_ack": auto_ack})

    def start_consuming(self):
        self.consuming = True

    def stop_consuming(self):
        self.consuming = False

    def basic_ack(self, delivery_tag, multiple=False):
        self.acks.append(delivery_tag)

    def basic_nack(self, delivery_tag, multiple=False, requeue=True):
        self.nacks.append((delivery_tag, requeue))

    def close(self):
        self.is_open = False


class FakeBroker:
    def __init__(self):
        self.publish_error = None
        self.is_open = True
        self.channels = []
        self.callbacks = []
        self.closed = False

    @contextmanager
    def channel(self):
        channel = FakeChannel()
        channel.publish_error = self.publish_error
        self.channels.append(channel)
        try:
            yield channel
        finally:
            channel.close()

    def open_channel(self):
        channel = FakeChannel()
        self.channels.append(channel)
        return channel

    def add_callback_threadsafe(self, callback):
        self.callbacks.append(callback)
        callback()

    def connect(self):
        self.is_open = True
        return self

    def close(self):
        self.is_open = False
        self.closed = True


class FakeStockClient:
    def __init__(self, products=None):
        # product_id -> ProductInfo, or an exception instance to raise
        self.products = dict(products or {})
        self.calls = []

    def fetch_product(self, product_id, authorization=None):
        self.calls.append(product_id)
        result = self.products.get(product_id)
        if result is None:
            raise ProductNotFound(product_id)
        if isinstance(result, Exception):
            raise result
        return result


class FakePublisher:
    def __init__(self, succeed=True):
        self.succeed = succeed
        self.messages = []

    def publish(self, message):
        self.messages.append(message)
        return self.succeed


def product(name="Widget", price="10.00", stock=10):
    return ProductInfo(name=name, price=Decimal(price), stock_quantity=stock)
