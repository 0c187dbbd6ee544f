from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from storefront.bootstrap import build_order_service
from storefront.config import Settings
from storefront.database import create_db_and_tables
from storefront.main import create_app
from storefront.schemas.order_schemas import OrderCreate
from storefront.services.email_service import SendResult

ADMIN_EMAIL = "bella@sweetsbybella.com"


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeNotifier:
    """Records every send; addresses can be set to fail or raise."""

    configured = True

    def __init__(self):
        self.attempts = []
        self.sent = []
        self.fail_for = set()
        self.raise_for = set()

    def send(self, to, subject, html):
        key = tuple(to) if isinstance(to, list) else to
        self.attempts.append((key, subject))
        if key in self.raise_for:
            raise RuntimeError("mail server unreachable")
        if key in self.fail_for:
            return SendResult(success=False, error="rejected")
        self.sent.append((key, subject, html))
        return SendResult(success=True, message_id=f"msg-{len(self.sent)}")

    def subjects_to(self, address):
        return [subject for to, subject, _ in self.sent if to == address]


def order_payload(**overrides) -> dict:
    payload = {
        "customer_name": "Jane Doe",
        "customer_email": "jane@example.com",
        "customer_phone": "555-0100",
        "payment_method": "zelle",
        "order_type": "pickup",
        "items": [
            {"name": "Chocolate Chip Cookie", "price": 2.50, "quantity": 2, "image": "/img/cc.png"},
            {"name": "Sugar Cookie", "price": 5.00, "quantity": 1},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENV="test",
        ADMIN_EMAILS=[ADMIN_EMAIL],
        CRON_SECRET=None,
        ADMIN_API_KEY=None,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def service(settings, engine, notifier, clock):
    service = build_order_service(settings, engine, notifier)
    service.clock = clock
    return service


@pytest.fixture
def make_order(service):
    def _make(**overrides):
        return service.create_order(OrderCreate(**order_payload(**overrides)))
    return _make


@pytest.fixture
def client(settings, engine, service):
    app = create_app(settings, engine=engine, order_service=service)
    with TestClient(app) as client:
        yield client
