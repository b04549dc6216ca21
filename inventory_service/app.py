import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI

from broker.config import RABBITMQ_URL
from broker.connection import BrokerConnection
from common.log import configure_logging
from inventory_service.config import INVENTORY_DB_PATH, MISSING_PRODUCT_POLICY, RUN_STOCK_WORKER
from inventory_service.consumer import StockAdjustmentConsumer
from inventory_service.routes import router
from inventory_service.store import InventoryStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging("InventoryService")
    store = InventoryStore(INVENTORY_DB_PATH)
    store.init()
    app.state.store = store
    app.state.worker_thread = None

    consumer = None
    if RUN_STOCK_WORKER:
        # The worker thread opens its own connection: pika connections stay on one thread.
        consumer = StockAdjustmentConsumer(BrokerConnection(RABBITMQ_URL), store, policy=MISSING_PRODUCT_POLICY)
        app.state.worker_thread = threading.Thread(target=consumer.run, name="stock-worker", daemon=True)
        app.state.worker_thread.start()
    try:
        yield
    finally:
        if consumer is not None:
            consumer.stop()
            app.state.worker_thread.join(timeout=5)


app = FastAPI(title="InventoryService", lifespan=lifespan)
app.include_router(router)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8001")))
