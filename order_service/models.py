from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderLineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="idProduto")
    quantity: int = Field(alias="quantidade")


class OrderRequest(BaseModel):
    # Range checks happen in the workflow so every violation is reported together.
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(alias="idCliente")
    items: List[OrderLineRequest] = Field(default_factory=list, alias="itens")


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="idProduto")
    product_name: str = Field(alias="nomeProduto")
    unit_price: Decimal = Field(alias="precoUnitario")
    quantity: int = Field(alias="quantidade")


class OrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    customer_id: int = Field(alias="idCliente")
    total: Decimal = Field(alias="valorTotal")
    status: str
    items: List[OrderItemResponse] = Field(alias="itens")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            total=order.total,
            status=order.status.value,
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in order.items
            ],
            created_at=order.created_at,
        )

