import os
from pathlib import Path

INVENTORY_URL = os.environ.get("INVENTORY_URL", "http://localhost:8001")
ORDERS_DB_PATH = os.environ.get(
    "ORDERS_DB_PATH", str(Path(__file__).resolve().parent / "data" / "orders.db")
)

# Unset means the transport default (requests waits indefinitely).
_timeout = os.environ.get("INVENTORY_TIMEOUT_S")
INVENTORY_TIMEOUT_S = float(_timeout) if _timeout else None
