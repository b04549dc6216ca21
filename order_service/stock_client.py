import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class ProductNotFound(Exception):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class StockServiceUnavailable(Exception):
    def __init__(self, product_id: int, reason: str):
        super().__init__(f"Inventory service unavailable for product {product_id}: {reason}")
        self.product_id = product_id


@dataclass(frozen=True)
class ProductInfo:
    name: str
    price: Decimal
    stock_quantity: int


class StockQueryClient:
    """Reads a product's name, price and stock from the inventory service.

    One GET per call. There are no retries, and no timeout unless one is
    passed in, so a hung inventory service blocks the calling request.
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def fetch_product(self, product_id: int, authorization: Optional[str] = None) -> ProductInfo:
        url = f"{self.base_url}/api/Produto/ObterPorId/{product_id}"
        # Forward the caller's credentials so the inventory service sees the same user.
        headers = {"Authorization": authorization} if authorization else None

        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Error fetching product %s from inventory service: %s", product_id, exc)
            raise StockServiceUnavailable(product_id, str(exc)) from exc

        if resp.status_code == 404:
            raise ProductNotFound(product_id)
        if resp.status_code != 200:
            logger.error("Inventory service answered %s for product %s", resp.status_code, product_id)
            raise StockServiceUnavailable(product_id, f"HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise StockServiceUnavailable(product_id, "unparsable response body") from exc
        if body is None:
            raise ProductNotFound(product_id)

        try:
            return ProductInfo(
                name=body["nome"],
                price=Decimal(str(body["preco"])),
                stock_quantity=int(body["quantidadeEstoque"]),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise StockServiceUnavailable(product_id, f"malformed product payload: {exc}") from exc
