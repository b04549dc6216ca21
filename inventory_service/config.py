import os
from pathlib import Path

INVENTORY_DB_PATH = os.environ.get(
    "INVENTORY_DB_PATH", str(Path(__file__).resolve().parent / "data" / "inventory.db")
)

# What the stock worker does with an adjustment for an unknown product:
# "skip" logs and moves on to the next entry, "abort" rejects the whole message.
MISSING_PRODUCT_POLICY = os.environ.get("MISSING_PRODUCT_POLICY", "skip")

# Set to 0 to run the HTTP API without the queue worker.
RUN_STOCK_WORKER = os.environ.get("RUN_STOCK_WORKER", "1") == "1"
