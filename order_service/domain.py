import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


class OrderStatus(str, enum.Enum):
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


@dataclass
class OrderLine:
    """A requested (product, quantity) pair, before any stock check."""

    product_id: int
    quantity: int


@dataclass
class OrderItem:
    product_id: int
    # Snapshot of the catalogue at creation time; later price changes do not touch it.
    product_name: str
    unit_price: Decimal
    quantity: int
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def extension(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    customer_id: int
    items: List[OrderItem] = field(default_factory=list)
    total: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.CONFIRMED
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def confirmed(cls, customer_id: int, items: List[OrderItem]) -> "Order":
        total = sum((item.extension for item in items), Decimal("0"))
        return cls(customer_id=customer_id, items=items, total=total, status=OrderStatus.CONFIRMED)

    def live_items(self) -> List[OrderItem]:
        return [item for item in self.items if not item.is_deleted]

    def cancel(self, now: datetime) -> None:
        self.status = OrderStatus.CANCELLED
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now
        for item in self.items:
            item.is_deleted = True
            item.deleted_at = now
