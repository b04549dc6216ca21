from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from common import db as common_db

SCHEMA = """
CREATE TABLE IF NOT EXISTS products (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    description TEXT    NOT NULL DEFAULT '',
    price       TEXT    NOT NULL,
    quantity    INTEGER NOT NULL DEFAULT 0,
    is_deleted  INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL,
    deleted_at  TEXT
);
"""


@dataclass
class Product:
    id: int
    name: str
    description: str
    price: Decimal
    stock_quantity: int


class InventoryStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def init(self) -> None:
        common_db.init_db(self.db_path, SCHEMA)

    def add_product(self, name: str, price: Decimal, stock_quantity: int, description: str = "") -> Product:
        now = datetime.now(timezone.utc).isoformat()
        conn = common_db.connect(self.db_path)
        try:
            cur = conn.execute(
                "INSERT INTO products (name, description, price, quantity, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (name, description, str(price), stock_quantity, now, now),
            )
            conn.commit()
            product_id = cur.lastrowid
        finally:
            conn.close()
        return Product(product_id, name, description, Decimal(str(price)), stock_quantity)

    def get_product(self, product_id: int) -> Optional[Product]:
        conn = common_db.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, name, description, price, quantity FROM products "
                "WHERE id = ? AND is_deleted = 0",
                (product_id,),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return Product(row["id"], row["name"], row["description"], Decimal(row["price"]), row["quantity"])

    def adjust_quantity(self, product_id: int, delta: int) -> bool:
        """Add ``delta`` to a live product's stock and commit. False when there is no such product.

        No lock is held across callers: a concurrent direct write to the same
        row simply wins or loses. Stock is not clamped at zero.
        """
        conn = common_db.connect(self.db_path)
        try:
            cur = conn.execute(
                "UPDATE products SET quantity = quantity + ?, updated_at = ? "
                "WHERE id = ? AND is_deleted = 0",
                (delta, datetime.now(timezone.utc).isoformat(), product_id),
            )
            conn.commit()
        finally:
            conn.close()
        return cur.rowcount > 0
