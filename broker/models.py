from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from common.ids import new_correlation_id


class StockAdjustmentItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="idProduto")
    # Signed: negative reserves stock, positive restores it.
    quantity: int = Field(alias="quantidade")


class StockAdjustmentMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    correlation_id: Optional[UUID] = Field(default=None, alias="correlationId")
    items: Optional[List[StockAdjustmentItem]] = Field(default=None, alias="itens")

    @classmethod
    def decrement(cls, lines, correlation_id: Optional[UUID] = None) -> "StockAdjustmentMessage":
        """Reservation issued when an order is created: one ``-quantity`` entry per line."""
        return cls._from_lines(lines, sign=-1, correlation_id=correlation_id)

    @classmethod
    def restore(cls, lines, correlation_id: Optional[UUID] = None) -> "StockAdjustmentMessage":
        """Compensation issued when an order is cancelled: one ``+quantity`` entry per line."""
        return cls._from_lines(lines, sign=1, correlation_id=correlation_id)

    @classmethod
    def _from_lines(cls, lines, sign: int, correlation_id: Optional[UUID]) -> "StockAdjustmentMessage":
        items = [
            StockAdjustmentItem(product_id=line.product_id, quantity=sign * line.quantity)
            for line in lines
        ]
        return cls(correlation_id=correlation_id or new_correlation_id(), items=items)

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_json(cls, data) -> "StockAdjustmentMessage":
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return cls.model_validate_json(data)
