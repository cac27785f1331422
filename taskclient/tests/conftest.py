"""Client fixtures wired to the real API app through an in-process ASGI transport."""

import httpx
import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from taskapi.database import get_session
from taskapi.main import app
from taskclient.api import TasksAPI
from taskclient.store import TaskStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture(name="api")
async def api_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield TasksAPI("http://testserver/api", client=http)
    app.dependency_overrides.clear()


@pytest.fixture(name="store")
def store_fixture(api: TasksAPI) -> TaskStore:
    return TaskStore(api)
