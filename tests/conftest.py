import asyncio
import os
import tempfile
import time
from typing import (
    Any,
    AsyncGenerator,
    Callable,
    Dict,
    Generator,
    List,
    Optional,
    Union,
)
from unittest.mock import AsyncMock, MagicMock

# Configuration is read at import time; point it at throwaway values first
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "shopfloor_chat_app.db"),
)
os.environ.setdefault("JWT_SECRET", "test-secret")

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shopfloor_chat.config import JWT_ALGORITHM, JWT_SECRET  # noqa: E402
from shopfloor_chat.database import Base  # noqa: E402
from shopfloor_chat.main import app  # noqa: E402
from shopfloor_chat.models.api.conversations import ConversationResponse  # noqa: E402
from shopfloor_chat.models.api.users import UserResponse  # noqa: E402
from shopfloor_chat.models.db import UserModel  # noqa: E402
from shopfloor_chat.realtime.hub import RealtimeHub  # noqa: E402
from shopfloor_chat.repositories.conversation_repository import (  # noqa: E402
    ConversationRepository,
)
from shopfloor_chat.repositories.user_repository import UserRepository  # noqa: E402


class FakeWebSocket:
    """In-memory stand-in for a WebSocket that records every frame sent."""

    def __init__(self, fail_on_send: bool = False) -> None:
        self.accepted = False
        self.sent: List[Dict[str, Any]] = []
        self.fail_on_send = fail_on_send
        self._incoming: "asyncio.Queue[Optional[Union[str, bytes]]]" = asyncio.Queue()

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail_on_send:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    async def receive(self) -> Dict[str, Any]:
        frame = await self._incoming.get()
        if frame is None:
            return {"type": "websocket.disconnect", "code": 1000}
        if isinstance(frame, bytes):
            return {"type": "websocket.receive", "bytes": frame}
        return {"type": "websocket.receive", "text": frame}

    def push(self, frame: Optional[Union[str, bytes]]) -> None:
        """Queue an incoming frame; None simulates the client closing."""
        self._incoming.put_nowait(frame)

    def events(self, name: str) -> List[Any]:
        """Payloads of every sent frame with the given event name."""
        return [frame["data"] for frame in self.sent if frame["event"] == name]


@pytest.fixture
def fake_websocket() -> Callable[..., FakeWebSocket]:
    """Factory for fake WebSocket objects."""
    return FakeWebSocket


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for signed access tokens."""

    def _make_token(
        user_id: Any,
        expires_in: int = 3600,
        secret: str = JWT_SECRET,
        claim: str = "userId",
    ) -> str:
        payload = {claim: user_id, "exp": int(time.time()) + expires_in}
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    return _make_token


@pytest.fixture(scope="function")
async def test_engine(tmp_path: Any) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the full schema, one per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}",
        echo=os.getenv("SQL_DEBUG", "false").lower() == "true",
        future=True,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Clean up
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Database session for integration tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def mock_db() -> AsyncGenerator[AsyncMock, None]:
    """Create a mock database session for unit tests."""
    mock_session = AsyncMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.close = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()  # add is sync, not async

    yield mock_session


@pytest.fixture
async def users(test_db: AsyncSession) -> Dict[str, UserResponse]:
    """Seeded users: alice, bob and carol are active, dave is inactive."""
    rows = [
        UserModel(
            username="alice",
            email="alice@plant.example.com",
            first_name="Alice",
            last_name="Martin",
            role="MANAGER",
        ),
        UserModel(
            username="bob",
            email="bob@plant.example.com",
            first_name="Bob",
            last_name="Keller",
        ),
        UserModel(
            username="carol",
            email="carol@plant.example.com",
            first_name="Carol",
            last_name="Nguyen",
        ),
        UserModel(
            username="dave",
            email="dave@plant.example.com",
            first_name="Dave",
            last_name="Olsen",
            status="inactive",
        ),
    ]
    test_db.add_all(rows)
    await test_db.commit()

    repo = UserRepository(test_db)
    return {row.username: await repo.get_by_id(row.id) for row in rows}


@pytest.fixture
async def conversation(
    test_db: AsyncSession, users: Dict[str, UserResponse]
) -> ConversationResponse:
    """Direct conversation between alice and bob."""
    return await ConversationRepository(test_db).create_with_participants(
        [users["alice"].id, users["bob"].id]
    )


@pytest.fixture
async def group_conversation(
    test_db: AsyncSession, users: Dict[str, UserResponse]
) -> ConversationResponse:
    """Group conversation between alice, bob and carol."""
    return await ConversationRepository(test_db).create_with_participants(
        [users["alice"].id, users["bob"].id, users["carol"].id],
        name="Line 3 shift leads",
        is_group=True,
    )


@pytest.fixture
def hub(session_factory: async_sessionmaker[AsyncSession]) -> RealtimeHub:
    return RealtimeHub(session_factory)


@pytest.fixture
def client() -> Generator[TestClient, Any, None]:
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
