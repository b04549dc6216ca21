from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from common import db as common_db
from order_service.domain import Order, OrderItem, OrderStatus

SCHEMA = """
CREATE TABLE IF NOT EXISTS orders (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id INTEGER NOT NULL,
    total       TEXT    NOT NULL,
    status      TEXT    NOT NULL,
    is_deleted  INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL,
    deleted_at  TEXT
);

CREATE TABLE IF NOT EXISTS order_items (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id     INTEGER NOT NULL REFERENCES orders(id),
    product_id   INTEGER NOT NULL,
    product_name TEXT    NOT NULL,
    unit_price   TEXT    NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    is_deleted   INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT    NOT NULL,
    updated_at   TEXT    NOT NULL,
    deleted_at   TEXT
);
"""


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class OrderStore:
    """Orders and their line items in sqlite. Rows are soft-deleted, never removed."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def init(self) -> None:
        common_db.init_db(self.db_path, SCHEMA)

    def add(self, order: Order) -> Order:
        now = datetime.now(timezone.utc)
        conn = common_db.connect(self.db_path)
        try:
            cur = conn.execute(
                "INSERT INTO orders (customer_id, total, status, is_deleted, created_at, updated_at) "
                "VALUES (?, ?, ?, 0, ?, ?)",
                (order.customer_id, str(order.total), order.status.value, _ts(now), _ts(now)),
            )
            order_id = cur.lastrowid
            for item in order.items:
                item_cur = conn.execute(
                    "INSERT INTO order_items "
                    "(order_id, product_id, product_name, unit_price, quantity, is_deleted, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, 0, ?, ?)",
                    (
                        order_id,
                        item.product_id,
                        item.product_name,
                        str(item.unit_price),
                        item.quantity,
                        _ts(now),
                        _ts(now),
                    ),
                )
                item.id = item_cur.lastrowid
                item.created_at = item.updated_at = now
            # Order and items land together or not at all.
            conn.commit()
        finally:
            conn.close()

        order.id = order_id
        order.created_at = order.updated_at = now
        return order

    def get(self, order_id: int) -> Optional[Order]:
        conn = common_db.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM orders WHERE id = ? AND is_deleted = 0", (order_id,)
            ).fetchone()
            if row is None:
                return None
            item_rows = conn.execute(
                "SELECT * FROM order_items WHERE order_id = ? AND is_deleted = 0 ORDER BY id",
                (order_id,),
            ).fetchall()
        finally:
            conn.close()

        items = [
            OrderItem(
                id=r["id"],
                product_id=r["product_id"],
                product_name=r["product_name"],
                unit_price=Decimal(r["unit_price"]),
                quantity=r["quantity"],
                is_deleted=bool(r["is_deleted"]),
                created_at=_dt(r["created_at"]),
                updated_at=_dt(r["updated_at"]),
                deleted_at=_dt(r["deleted_at"]),
            )
            for r in item_rows
        ]
        return Order(
            id=row["id"],
            customer_id=row["customer_id"],
            total=Decimal(row["total"]),
            status=OrderStatus(row["status"]),
            items=items,
            is_deleted=bool(row["is_deleted"]),
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
            deleted_at=_dt(row["deleted_at"]),
        )

    def mark_cancelled(self, order: Order) -> bool:
        """Persist a cancelled order: the order row and all its items share one ``deleted_at``."""
        conn = common_db.connect(self.db_path)
        try:
            cur = conn.execute(
                "UPDATE orders SET status = ?, is_deleted = 1, deleted_at = ?, updated_at = ? "
                "WHERE id = ? AND is_deleted = 0",
                (order.status.value, _ts(order.deleted_at), _ts(order.updated_at), order.id),
            )
            changed = cur.rowcount
            conn.execute(
                "UPDATE order_items SET is_deleted = 1, deleted_at = ?, updated_at = ? "
                "WHERE order_id = ? AND is_deleted = 0",
                (_ts(order.deleted_at), _ts(order.updated_at), order.id),
            )
            conn.commit()
        finally:
            conn.close()
        return changed > 0
