import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import mioto.database_models  # noqa: F401  registra as tabelas no Base
from mioto.client import OrderClient
from mioto.database import Base, build_engine
from mioto.errors import StoreUnavailable
from mioto.models.order import Actor, ActorRole, OrderCreate, PaymentMethod
from mioto.store.base import OrderStore
from mioto.store.local_store import LocalOrderStore
from mioto.store.sql_store import SqlOrderStore


class DownStore(OrderStore):
    """Loja que está sempre fora do ar."""

    def _fail(self, *args, **kwargs):
        raise StoreUnavailable("backend fora do ar")

    list_orders = _fail
    get_order = _fail
    create_order = _fail
    update_order_status = _fail
    add_review = _fail

    def check_connection(self):
        return False, "backend fora do ar"


@pytest.fixture
def sql_store():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield SqlOrderStore(sessionmaker(bind=engine, autoflush=False))
    engine.dispose()


@pytest.fixture(params=["local", "sql"])
def store(request):
    if request.param == "local":
        return LocalOrderStore()
    return request.getfixturevalue("sql_store")


@pytest.fixture
def driver():
    return Actor(id="motorista-1", role=ActorRole.MOTORISTA)


@pytest.fixture
def workshop():
    return Actor(id="oficina-1", role=ActorRole.OFICINA)


@pytest.fixture
def other_workshop():
    return Actor(id="oficina-2", role=ActorRole.OFICINA)


@pytest.fixture
def make_request():
    def _make(**overrides):
        data = {
            "driver_id": "motorista-1",
            "driver_name": "Motorista Teste",
            "driver_phone": "(11) 98888-8888",
            "workshop_id": "oficina-1",
            "workshop_name": "Oficina Central",
            "workshop_phone": "(11) 99999-9999",
            "service_name": "Troca de Óleo",
            "price": 150,
            "payment_method": PaymentMethod.PAY_ON_SITE,
            "vehicle": "Fiat Uno",
            "vehicle_plate": "ABC1D23",
        }
        data.update(overrides)
        return OrderCreate(**data)

    return _make


@pytest.fixture
def driver_client(store, driver):
    return OrderClient(store, driver, interval=0, max_failures=3)


@pytest.fixture
def workshop_client(store, workshop):
    return OrderClient(store, workshop, interval=0, max_failures=3)
