from typing import Any

import pytest
from eth_account import Account
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import hl_actions.models  # noqa: F401  registers the tables on Base
from hl_actions.config import Settings, get_settings
from hl_actions.db import Base, get_db
from hl_actions.deps import get_exchange_client, get_price_resolver
from hl_actions.errors import ExchangeError
from hl_actions.main import app
from hl_actions.models import ActionRecord
from hl_actions.services.execution_client import ExchangeClient
from hl_actions.services.market_price import MarketPriceResolver

TEST_PRIVATE_KEY = "0x" + "11" * 32
TEST_ADDRESS = Account.from_key(TEST_PRIVATE_KEY).address
BUILDER_ADDRESS = "0x" + "ab" * 20
SUB_ONE = "0x" + "01" * 20
SUB_TWO = "0x" + "02" * 20


def order_response(*statuses: dict[str, Any]) -> dict[str, Any]:
    return {"status": "ok", "response": {"type": "order", "data": {"statuses": list(statuses)}}}


class StubResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubHttp:
    """Stands in for requests.Session in the price resolver."""

    def __init__(self, response: StubResponse | Exception) -> None:
        self.response = response
        self.requests: list[dict[str, Any]] = []

    def get(self, url: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> StubResponse:
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeExchangeClient(ExchangeClient):
    """
    Records every call. `order_results` is consumed one item per
    `place_orders` call; an Exception item is raised instead of returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.order_results: list[Any] = []
        self.failures: dict[str, Exception] = {}
        self.states: dict[str, Any] = {}
        self.failing_addresses: set[str] = set()

    def _record(self, op: str, /, **kwargs: Any) -> None:
        self.calls.append((op, kwargs))
        if op in self.failures:
            raise self.failures[op]

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def kwargs_for(self, name: str) -> list[dict[str, Any]]:
        return [kwargs for call, kwargs in self.calls if call == name]

    def place_orders(self, wallet, environment, orders):
        self._record("place_orders", wallet=wallet, environment=environment, orders=list(orders))
        if self.order_results:
            result = self.order_results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return order_response({"resting": {"oid": 123}})

    def cancel_order(self, wallet, environment, *, symbol, oid):
        self._record("cancel_order", wallet=wallet, symbol=symbol, oid=oid)
        return {"status": "ok", "response": {"type": "cancel", "data": {"statuses": ["success"]}}}

    def cancel_order_by_cloid(self, wallet, environment, *, symbol, cloid):
        self._record("cancel_order_by_cloid", wallet=wallet, symbol=symbol, cloid=cloid)
        return {"status": "ok", "response": {"type": "cancel", "data": {"statuses": ["success"]}}}

    def update_leverage(self, wallet, environment, *, symbol, leverage, leverage_mode):
        self._record("update_leverage", wallet=wallet, symbol=symbol, leverage=leverage, leverage_mode=leverage_mode)
        return {"status": "ok", "response": {"type": "default"}}

    def create_sub_account(self, wallet, environment, *, name):
        self._record("create_sub_account", wallet=wallet, name=name)
        return {"status": "ok", "response": {"type": "createSubAccount", "data": SUB_ONE}}

    def transfer_sub_account(self, wallet, environment, *, sub_account_user, is_deposit, usd):
        self._record(
            "transfer_sub_account", wallet=wallet, sub_account_user=sub_account_user, is_deposit=is_deposit, usd=usd
        )
        return {"status": "ok", "response": {"type": "default"}}

    def set_portfolio_margin(self, wallet, environment, *, user, enabled):
        self._record("set_portfolio_margin", wallet=wallet, user=user, enabled=enabled)
        return {"status": "ok", "response": {"type": "default"}}

    def approve_builder_fee(self, wallet, environment, *, builder, max_fee_rate):
        self._record("approve_builder_fee", wallet=wallet, builder=builder, max_fee_rate=max_fee_rate)
        return {"status": "ok", "response": {"type": "default"}}

    def fetch_clearinghouse_state(self, environment, address):
        self._record("fetch_clearinghouse_state", environment=environment, address=address)
        if address in self.failing_addresses:
            raise ExchangeError(f"Failed to fetch clearinghouse state for {address}", response={"error": "boom"})
        return self.states.get(address, {"marginSummary": {"accountValue": "0"}, "assetPositions": [], "user": address})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ARBITRUM_RPC_URL="https://arb.example",
        ARBITRUM_SEPOLIA_RPC_URL="https://arb-sepolia.example",
        PRICE_GATEWAY_URL="https://gateway.example/",
        HYPERLIQUID_PRIVATE_KEY=TEST_PRIVATE_KEY,
        HYPERLIQUID_ACCOUNT_ADDRESS=None,
        HYPERLIQUID_BUILDER_ADDRESS=BUILDER_ADDRESS,
    )


@pytest.fixture
def db_session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def exchange() -> FakeExchangeClient:
    return FakeExchangeClient()


@pytest.fixture
def gateway() -> StubHttp:
    return StubHttp(StubResponse(200, {"markPrice": 50000}))


@pytest.fixture
def prices(settings: Settings, gateway: StubHttp) -> MarketPriceResolver:
    return MarketPriceResolver(settings.PRICE_GATEWAY_URL, http=gateway)


@pytest.fixture
def client(settings, db_session, exchange, prices) -> TestClient:
    def _db():
        yield db_session

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_exchange_client] = lambda: exchange
    app.dependency_overrides[get_price_resolver] = lambda: prices
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def records(db_session):
    def _records(action: str | None = None) -> list[ActionRecord]:
        db_session.expire_all()
        stmt = select(ActionRecord).order_by(ActionRecord.id)
        if action is not None:
            stmt = stmt.where(ActionRecord.action == action)
        return list(db_session.scalars(stmt).all())

    return _records
