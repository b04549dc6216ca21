from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nome", min_length=1)
    description: str = Field(default="", alias="descricao")
    price: Decimal = Field(alias="preco", gt=0)
    stock_quantity: int = Field(alias="quantidadeEstoque", ge=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(alias="nome")
    description: str = Field(alias="descricao")
    price: Decimal = Field(alias="preco")
    stock_quantity: int = Field(alias="quantidadeEstoque")

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock_quantity=product.stock_quantity,
        )
