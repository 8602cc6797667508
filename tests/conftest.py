import os

# Settings are read once and cached, so the environment must be in place
# before anything from the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["PAYU_MERCHANT_KEY"] = "TESTKEY"
os.environ["PAYU_MERCHANT_SALT"] = "TESTSALT"
os.environ["PAYU_MODE"] = "TEST"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BASE_URL"] = "http://api.shop.test"
os.environ["FRONTEND_URL"] = "http://shop.test"

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from services.auth_service.models import AdminUser
from services.auth_service.service import AuthService
from services.checkout_service.schemas import CartLine, CheckoutRequest
from services.payment_service.signature import compute_response_hash
from services.product_service.models import Product
from shared.config.database import Base, get_db
from shared.config.settings import get_settings
from shared.security import create_access_token, limiter


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fetch(session_factory):
    """Read a row through a fresh session so assertions see committed state."""
    async def _fetch(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)
    return _fetch


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(session_factory):
    async def _make(name="Walnut Desk Organiser", price="500.00", stock=10, is_active=True):
        async with session_factory() as session:
            product = Product(
                name=name,
                description=f"{name} for testing",
                price_base=Decimal(price),
                stock=stock,
                is_active=is_active,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product
    return _make


@pytest.fixture
def checkout_request():
    def _build(*lines, currency="INR", **overrides):
        data = {
            "name": "Asha Rao",
            "email": "asha@example.com",
            "phone": "9876543210",
            "shipping_address": "12 MG Road, Bengaluru 560001",
            "currency": currency,
            "items": [CartLine(product_id=pid, quantity=qty) for pid, qty in lines],
        }
        data.update(overrides)
        return CheckoutRequest(**data)
    return _build


@pytest.fixture
def signed_callback(settings):
    """Gateway callback for a transaction's outbound params, signed as PayU would."""
    def _sign(raw_request: dict, status="success", **extra):
        params = {
            "mihpayid": "403993715531077182",
            "mode": "CC",
            "status": status,
            "txnid": raw_request["txnid"],
            "amount": raw_request["amount"],
            "productinfo": raw_request["productinfo"],
            "firstname": raw_request["firstname"],
            "email": raw_request["email"],
            "phone": raw_request["phone"],
            "udf1": raw_request["udf1"],
            "udf2": "",
            "udf3": "",
            "udf4": "",
            "udf5": "",
        }
        params.update(extra)
        params["hash"] = compute_response_hash(
            settings.payu_merchant_key, settings.payu_merchant_salt, params
        )
        return params
    return _sign


@pytest.fixture
def make_admin(session_factory, settings):
    async def _make(email="ops@example.com", password="s3cret-pass", role="superadmin"):
        async with session_factory() as session:
            admin = AdminUser(
                email=email,
                hashed_password=AuthService.hash_password(password),
                role=role,
                is_active=True,
            )
            session.add(admin)
            await session.commit()
            await session.refresh(admin)
        token = create_access_token({"sub": str(admin.id), "role": admin.role}, settings)
        return admin, {"Authorization": f"Bearer {token}"}
    return _make
