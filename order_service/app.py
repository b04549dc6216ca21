import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from broker.config import RABBITMQ_URL
from broker.connection import BrokerConnection
from common.log import configure_logging
from order_service.config import INVENTORY_TIMEOUT_S, INVENTORY_URL, ORDERS_DB_PATH
from order_service.publisher import StockAdjustmentPublisher
from order_service.routes import request_validation_handler, router
from order_service.stock_client import StockQueryClient
from order_service.store import OrderStore
from order_service.workflow import OrderWorkflow

logger = logging.getLogger(__name__)


def build_workflow(broker: BrokerConnection, db_path: str = ORDERS_DB_PATH) -> OrderWorkflow:
    store = OrderStore(db_path)
    store.init()
    return OrderWorkflow(
        store=store,
        stock_client=StockQueryClient(INVENTORY_URL, timeout=INVENTORY_TIMEOUT_S),
        publisher=StockAdjustmentPublisher(broker),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging("OrderService")
    broker = BrokerConnection(RABBITMQ_URL).connect()
    app.state.broker = broker
    app.state.workflow = build_workflow(broker)
    logger.info("Inventory service at %s, orders db %s", INVENTORY_URL, ORDERS_DB_PATH)
    try:
        yield
    finally:
        broker.close()


app = FastAPI(title="OrderService", lifespan=lifespan)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.include_router(router)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
