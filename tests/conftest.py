import os
import sys
from importlib import reload
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ADMIN_TOKEN = "admintoken"
KEY_ID = "rzp_test_123"
KEY_SECRET = "testsecret"


class FakeGatewayClient:
    """Stands in for the Razorpay client and remembers every order it was asked for."""

    def __init__(self, fail: bool = False):
        self.key_id = KEY_ID
        self.fail = fail
        self.requests = []

    async def create_order(self, order):
        from coin_wallet.contracts.contracts import GatewayOrder
        from coin_wallet.errors import GatewayError

        self.requests.append(order)
        if self.fail:
            raise GatewayError("gateway unavailable", status_code=503)
        return GatewayOrder(id=f"order_test{len(self.requests)}", amount=order.amount, currency=order.currency)


@pytest.fixture(scope="function")
def app_module(tmp_path_factory):
    """
    Reload the app against a disposable SQLite DB and test credentials.
    """
    db_path = tmp_path_factory.mktemp("data") / "test.db"
    new_env = {
        "DB_URL": f"sqlite:///{db_path}",
        "ADMIN_TOKEN": ADMIN_TOKEN,
        "RAZORPAY_KEY_ID": KEY_ID,
        "RAZORPAY_KEY_SECRET": KEY_SECRET,
    }
    old_env = {k: os.environ.get(k) for k in new_env}
    os.environ.update(new_env)

    try:
        import coin_wallet.config as config
        import coin_wallet.database as database
        import coin_wallet.models as models
        import coin_wallet.helpers as helpers
        import coin_wallet.store as store
        import coin_wallet.contracts.contracts as contracts
        import coin_wallet.clients.razorpay_client as razorpay_client
        import coin_wallet.security as security
        import coin_wallet.services.wallet as wallet
        import coin_wallet.services.payments as payments
        import coin_wallet.services.withdrawals as withdrawals
        import coin_wallet.services.manual_payments as manual_payments
        import coin_wallet.services as services
        import coin_wallet.main as main

        for module in (
            config,
            database,
            models,
            helpers,
            store,
            contracts,
            razorpay_client,
            security,
            wallet,
            payments,
            withdrawals,
            manual_payments,
            services,
            main,
        ):
            reload(module)

        models.Base.metadata.drop_all(bind=database.engine)
        models.Base.metadata.create_all(bind=database.engine)
        return main, database, models
    finally:
        for key, value in old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


@pytest.fixture
def gateway(app_module):
    main, _, _ = app_module
    fake = FakeGatewayClient()
    main.app.dependency_overrides[main.get_gateway_client] = lambda: fake
    yield fake
    main.app.dependency_overrides.pop(main.get_gateway_client, None)


@pytest.fixture
def client(app_module, gateway):
    main, _, _ = app_module
    with TestClient(main.app) as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def store(app_module):
    _, database, _ = app_module
    from coin_wallet.store import SqlAlchemyPlayerStore

    db = database.SessionLocal()
    try:
        yield SqlAlchemyPlayerStore(db)
    finally:
        db.close()
