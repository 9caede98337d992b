# tests/conftest.py

import os
import asyncio
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Optional
from contextlib import asynccontextmanager
from datetime import datetime, UTC

# --- 테스트 환경 변수 ---
# app 모듈이 settings 를 읽기 전에 설정해야 합니다.
TEST_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "test_sweetshop.db")
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{TEST_DB_PATH}")

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("SECRET_KEY", "test-access-secret-key")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from sqlalchemy import delete  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from app.main import app as main_app  # noqa: E402
from app.core.database import get_session  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.domains.usr import models as usr_models  # noqa: E402
from app.domains.sweet import models as sweet_models  # noqa: E402


# --- 테스트용 데이터베이스 설정 ---
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    future=True,
    poolclass=NullPool,     # 각 연결이 독립적으로 사용되고 바로 닫히도록 함
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    class_=AsyncSession,
    expire_on_commit=False,
)

ADMIN_PASSWORD = "adminpass123"
CUSTOMER_PASSWORD = "customerpass123"


# --- 데이터베이스 픽스처 ---
@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """
    테스트 세션 시작 시 모든 테이블을 삭제하고 재생성합니다.
    테스트 종료 시 다시 테이블을 삭제합니다.
    """
    async def _reset(create: bool) -> None:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
            if create:
                await conn.run_sync(SQLModel.metadata.create_all)
        await engine.dispose()

    asyncio.run(_reset(create=True))
    yield
    asyncio.run(_reset(create=False))


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 바깥 트랜잭션을 시작하고, 테스트 완료 후 롤백하여
    테스트 간의 격리를 보장하는 비동기 데이터베이스 세션을 제공합니다.
    세션 내부의 commit() 은 바깥 트랜잭션을 커밋하지 않습니다.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()
    session = TestingSessionLocal(bind=connection)

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


@pytest.fixture
def independent_session() -> Callable[[], AsyncSession]:
    """각 호출마다 자체 연결(바깥 트랜잭션 없음)을 쓰는 새 세션을 만드는 팩토리."""
    return lambda: TestingSessionLocal(bind=test_engine)


@pytest_asyncio.fixture(scope="function")
async def committed_sweet() -> AsyncGenerator[sweet_models.Sweet, None]:
    """
    바깥 트랜잭션 없이 실제로 커밋된 카테고리/스윗(재고 5)을 만듭니다.
    여러 독립 세션이 같은 행을 보아야 하는 테스트용이며, 종료 시 직접 삭제합니다.
    """
    async with TestingSessionLocal(bind=test_engine) as session:
        category = sweet_models.Category(name="Race Candies")
        session.add(category)
        await session.commit()
        sweet = sweet_models.Sweet(name="Race Toffee", category_id=category.id, price=Decimal("2.00"), quantity=5)
        session.add(sweet)
        await session.commit()
        await session.refresh(sweet)

    try:
        yield sweet
    finally:
        async with TestingSessionLocal(bind=test_engine) as session:
            await session.execute(delete(sweet_models.Sweet).where(sweet_models.Sweet.id == sweet.id))
            await session.execute(delete(sweet_models.Category).where(sweet_models.Category.id == category.id))
            await session.commit()


# --- 데이터 팩토리 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """
    역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다.
    """
    async def _create_user(
        email: str,
        password: str,
        role: usr_models.UserRole = usr_models.UserRole.CUSTOMER,
        name: str = "Test User",
        **kwargs,
    ) -> usr_models.User:
        user = usr_models.User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
def category_factory(db_session: AsyncSession) -> Callable[..., Awaitable[sweet_models.Category]]:
    async def _create_category(name: str, deleted: bool = False) -> sweet_models.Category:
        category = sweet_models.Category(name=name, deleted_at=datetime.now(UTC) if deleted else None)
        db_session.add(category)
        await db_session.commit()
        await db_session.refresh(category)
        return category
    return _create_category


@pytest_asyncio.fixture(scope="function")
def sweet_factory(db_session: AsyncSession) -> Callable[..., Awaitable[sweet_models.Sweet]]:
    """카테고리에 속한 스윗을 직접 DB 에 생성합니다 (API 검증을 거치지 않음)."""
    async def _create_sweet(
        name: str,
        category: sweet_models.Category,
        price: str = "10.00",
        quantity: int = 10,
        deleted: bool = False,
    ) -> sweet_models.Sweet:
        sweet = sweet_models.Sweet(
            name=name,
            category_id=category.id,
            price=Decimal(price),
            quantity=quantity,
            deleted_at=datetime.now(UTC) if deleted else None,
        )
        db_session.add(sweet)
        await db_session.commit()
        await db_session.refresh(sweet)
        return sweet
    return _create_sweet


# --- 역할별 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """관리자(ADMIN) 사용자를 생성합니다."""
    return await user_factory("admin@example.com", ADMIN_PASSWORD, role=usr_models.UserRole.ADMIN, name="Shop Admin")


@pytest_asyncio.fixture(scope="function")
async def test_customer(user_factory: Callable) -> usr_models.User:
    """일반 고객(CUSTOMER) 사용자를 생성합니다."""
    return await user_factory("customer@example.com", CUSTOMER_PASSWORD, name="Jane Customer")


@pytest_asyncio.fixture(scope="function")
async def test_other_customer(user_factory: Callable) -> usr_models.User:
    return await user_factory("other@example.com", CUSTOMER_PASSWORD, name="Other Customer")


@pytest_asyncio.fixture(scope="function")
async def test_category(category_factory: Callable) -> sweet_models.Category:
    return await category_factory("Chocolates")


@pytest_asyncio.fixture(scope="function")
async def test_sweet(sweet_factory: Callable, test_category: sweet_models.Category) -> sweet_models.Sweet:
    return await sweet_factory("Dark Truffle", test_category, price="12.50", quantity=5)


# --- 클라이언트 픽스처 ---
@asynccontextmanager
async def _override_session(db_session: AsyncSession):
    async def override_get_session():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides[get_session] = override_get_session
    try:
        yield
    finally:
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    인증되지 않은 사용자를 위한 AsyncClient 인스턴스를 생성하고,
    테스트용 비동기 DB 세션을 주입합니다.
    """
    async with _override_session(db_session):
        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client


@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(
    db_session: AsyncSession,
) -> Callable[[usr_models.User, str], AsyncGenerator[AsyncClient, None]]:
    """
    특정 사용자로 로그인된 AsyncClient 를 만드는 비동기 컨텍스트 매니저를 반환합니다.
    실제 /api/auth/login 을 호출하고 발급된 access_token 을 Bearer 헤더에 설정합니다.
    """
    @asynccontextmanager
    async def _create_client_context(
        user: usr_models.User, password: str, email: Optional[str] = None
    ) -> AsyncGenerator[AsyncClient, None]:
        async with _override_session(db_session):
            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                login_data = {"email": email or user.email, "password": password}
                res = await client.post("/api/auth/login", json=login_data)
                if res.status_code != 200:
                    pytest.fail(f"Login failed for {user.email}: {res.text}")

                token = res.json()["data"]["access_token"]
                client.headers["Authorization"] = f"Bearer {token}"
                # 인증은 Bearer 헤더만으로 검증합니다.
                client.cookies.clear()
                yield client

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_admin_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, ADMIN_PASSWORD) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def customer_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_customer: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """일반 고객으로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_customer, CUSTOMER_PASSWORD) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def other_customer_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_other_customer: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_other_customer, CUSTOMER_PASSWORD) as client:
        yield client
