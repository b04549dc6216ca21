from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from fakes import FakePublisher, FakeStockClient, product
from inventory_service.routes import router as inventory_router
from order_service.routes import request_validation_handler
from order_service.routes import router as order_router
from order_service.stock_client import StockServiceUnavailable
from order_service.workflow import OrderWorkflow


@pytest.fixture
def stock():
    return FakeStockClient({7: product("Lamp", "50.00", 10), 8: product("Desk", "120.00", 1)})


@pytest.fixture
def order_client(order_store, stock):
    app = FastAPI()
    app.include_router(order_router)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.state.broker = None
    app.state.publisher = FakePublisher()
    app.state.workflow = OrderWorkflow(order_store, stock, app.state.publisher)
    return TestClient(app)


@pytest.fixture
def inventory_client(inventory_store):
    app = FastAPI()
    app.include_router(inventory_router)
    app.state.store = inventory_store
    app.state.worker_thread = None
    return TestClient(app)


class TestOrderRoutes:
    def test_create_returns_201_with_order(self, order_client):
        resp = order_client.post(
            "/api/Pedido/Cadastrar",
            json={"idCliente": 1, "itens": [{"idProduto": 7, "quantidade": 3}]},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert Decimal(str(body["valorTotal"])) == Decimal("150.00")
        assert body["status"] == "Confirmed"
        assert body["itens"][0]["nomeProduto"] == "Lamp"
        assert body["itens"][0]["quantidade"] == 3

    def test_create_validation_error_is_400(self, order_client):
        resp = order_client.post("/api/Pedido/Cadastrar", json={"idCliente": 0, "itens": []})

        assert resp.status_code == 400
        assert len(resp.json()["detail"]["errors"]) == 2

    @pytest.mark.parametrize(
        "body, field",
        [
            ({"idCliente": 1, "itens": [{"idProduto": "abc", "quantidade": 1}]}, "itens.0.idProduto"),
            ({"itens": [{"idProduto": 7, "quantidade": 1}]}, "idCliente"),
            ({"idCliente": "x", "itens": []}, "idCliente"),
        ],
    )
    def test_malformed_body_is_400_not_422(self, order_client, stock, body, field):
        resp = order_client.post("/api/Pedido/Cadastrar", json=body)

        assert resp.status_code == 400
        assert any(error.startswith(field) for error in resp.json()["detail"]["errors"])
        assert stock.calls == []

    def test_create_unknown_product_is_404(self, order_client):
        resp = order_client.post(
            "/api/Pedido/Cadastrar", json={"idCliente": 1, "itens": [{"idProduto": 99, "quantidade": 1}]}
        )

        assert resp.status_code == 404

    def test_create_insufficient_stock_is_409_with_quantities(self, order_client):
        resp = order_client.post(
            "/api/Pedido/Cadastrar", json={"idCliente": 1, "itens": [{"idProduto": 8, "quantidade": 2}]}
        )

        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["available"] == 1
        assert detail["requested"] == 2

    def test_create_inventory_down_is_503(self, order_client, stock):
        stock.products[7] = StockServiceUnavailable(7, "connection refused")

        resp = order_client.post(
            "/api/Pedido/Cadastrar", json={"idCliente": 1, "itens": [{"idProduto": 7, "quantidade": 1}]}
        )

        assert resp.status_code == 503

    def test_get_and_cancel(self, order_client):
        created = order_client.post(
            "/api/Pedido/Cadastrar", json={"idCliente": 1, "itens": [{"idProduto": 7, "quantidade": 1}]}
        ).json()

        assert order_client.get(f"/api/Pedido/ObterPorId/{created['id']}").status_code == 200
        assert order_client.delete(f"/api/Pedido/Excluir/{created['id']}").status_code == 204
        assert order_client.get(f"/api/Pedido/ObterPorId/{created['id']}").status_code == 404
        assert order_client.delete(f"/api/Pedido/Excluir/{created['id']}").status_code == 404

    def test_health(self, order_client):
        assert order_client.get("/health").json() == {"status": "ok", "broker": "closed"}


class TestInventoryRoutes:
    def test_get_product(self, inventory_client, inventory_store):
        created = inventory_store.add_product("Lamp", Decimal("50.00"), 10, "desk lamp")

        resp = inventory_client.get(f"/api/Produto/ObterPorId/{created.id}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["nome"] == "Lamp"
        assert body["descricao"] == "desk lamp"
        assert Decimal(str(body["preco"])) == Decimal("50.00")
        assert body["quantidadeEstoque"] == 10

    def test_unknown_product_is_404(self, inventory_client):
        assert inventory_client.get("/api/Produto/ObterPorId/404").status_code == 404

    def test_add_product(self, inventory_client, inventory_store):
        resp = inventory_client.post(
            "/api/Produto/Cadastrar", json={"nome": "Chair", "preco": "35.50", "quantidadeEstoque": 4}
        )

        assert resp.status_code == 201
        assert inventory_store.get_product(resp.json()["id"]).stock_quantity == 4

    def test_add_product_rejects_negative_stock(self, inventory_client):
        resp = inventory_client.post(
            "/api/Produto/Cadastrar", json={"nome": "Chair", "preco": "35.50", "quantidadeEstoque": -1}
        )

        assert resp.status_code == 422

    def test_health_reports_stopped_worker(self, inventory_client):
        assert inventory_client.get("/health").json() == {"status": "ok", "stock_worker": "stopped"}
