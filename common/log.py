import logging
import sys
import time

LOG_FORMAT = "[%(asctime)s.%(msecs)03d] %(service)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


class _ServiceFilter(logging.Filter):
    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        return True


def configure_logging(service: str, level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    handler.addFilter(_ServiceFilter(service))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    # pika is chatty at INFO on every channel open/close.
    logging.getLogger("pika").setLevel(logging.WARNING)
