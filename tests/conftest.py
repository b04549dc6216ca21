import pytest

from fakes import FakeBroker, FakePublisher
from inventory_service.store import InventoryStore
from order_service.store import OrderStore


@pytest.fixture
def order_store(tmp_path):
    store = OrderStore(str(tmp_path / "orders.db"))
    store.init()
    return store


@pytest.fixture
def inventory_store(tmp_path):
    store = InventoryStore(str(tmp_path / "inventory.db"))
    store.init()
    return store


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def broker():
    return FakeBroker()
