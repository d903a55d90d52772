import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECURITY__SECRET_KEY", "test-secret-key")
os.environ.setdefault("WEBHOOKS__CALLBACK_TOKEN", "test-callback-token")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tindago_ledger.core.config import get_settings
from tindago_ledger.core.security import create_access_token
from tindago_ledger.infrastructure.database import build_engine, init_db
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.modules.commission import CommissionResolver, RateCache, get_rate_cache
from tindago_ledger.modules.ledger import LedgerService
from tindago_ledger.modules.payouts import PayoutService
from tindago_ledger.modules.wallets import WalletService

get_settings.cache_clear()

CALLBACK_TOKEN = "test-callback-token"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_rate_cache():
    get_rate_cache().invalidate()
    yield
    get_rate_cache().invalidate()


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver(session, clock):
    return CommissionResolver.with_session(session, cache=RateCache(ttl=300, clock=clock))


@pytest.fixture
def wallets(session):
    return WalletService.with_session(session)


@pytest.fixture
def ledger(session):
    return LedgerService.with_session(session)


@pytest.fixture
def payouts(session):
    return PayoutService.with_session(session)


@pytest.fixture
async def funded_store(wallets, session):
    """A store holding 1,000.00 in its wallet."""
    await wallets.credit(store_id="store-1", amount_cents=100000, description="Opening balance")
    await session.commit()
    return "store-1"


@pytest.fixture
def app(session_factory):
    from tindago_ledger.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def admin_headers():
    token = create_access_token("admin-1", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store_headers():
    token = create_access_token("owner-1", "store_owner", store_id="store-1")
    return {"Authorization": f"Bearer {token}"}
