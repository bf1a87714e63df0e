"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
# Ensure tests run in dev mode (bypasses auth) regardless of local .env
os.environ["DEV_MODE"] = "true"
for _name in ("GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_REPO", "GITHUB_BRANCH"):
    os.environ.pop(_name, None)

from collections.abc import AsyncGenerator  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from db.session import configure_sqlite  # noqa: E402
from models.base import Base  # noqa: E402
from models.prompt import Prompt  # noqa: E402
from schemas.prompt import PromptCreate  # noqa: E402
from services.github_client import GitHubAPIError, RemoteFile  # noqa: E402
from services.prompt_service import PromptService  # noqa: E402
from services.publish_service import PublishService  # noqa: E402


class FakeGitHubContents:
    """
    In-memory stand-in for GitHubContentsClient.

    Tracks files with a fresh SHA per write and enforces the same SHA rules as
    GitHub: creating over an existing file, or writing/deleting with a stale
    SHA, is rejected with a 409/422.
    """

    def __init__(self) -> None:
        self.files: dict[str, RemoteFile] = {}
        self.commits: list[tuple[str, str, str]] = []  # (method, path, message)
        self.fail_on: dict[tuple[str, str], int] = {}  # (method, path) -> status
        self._shas = count(1)

    def fail(self, method: str, path: str, status_code: int = 500) -> None:
        """Make every future ``method`` call on ``path`` fail."""
        self.fail_on[(method, path)] = status_code

    def _check(self, method: str, path: str) -> None:
        status_code = self.fail_on.get((method, path))
        if status_code is not None:
            raise GitHubAPIError(
                f"GitHub {method} of {path} failed ({status_code})",
                status_code=status_code,
            )

    async def get_file(self, path: str) -> RemoteFile | None:
        self._check("GET", path)
        return self.files.get(path)

    async def put_file(
        self,
        path: str,
        content: str,
        message: str,
        sha: str | None = None,
    ) -> str:
        self._check("PUT", path)
        existing = self.files.get(path)
        if existing is not None and sha is None:
            raise GitHubAPIError("Invalid request. \"sha\" wasn't supplied.", status_code=422)
        if existing is not None and sha != existing.sha:
            raise GitHubAPIError(f"{path} does not match {sha}", status_code=409)
        new_sha = f"sha-{next(self._shas)}"
        self.files[path] = RemoteFile(path=path, sha=new_sha, content=content)
        self.commits.append(("PUT", path, message))
        return new_sha

    async def delete_file(self, path: str, message: str, sha: str) -> None:
        self._check("DELETE", path)
        existing = self.files.get(path)
        if existing is None:
            raise GitHubAPIError("Not Found", status_code=404)
        if sha != existing.sha:
            raise GitHubAPIError(f"{path} does not match {sha}", status_code=409)
        del self.files[path]
        self.commits.append(("DELETE", path, message))


@pytest.fixture
def database_url() -> str:
    """Database used by the suite; TEST_DATABASE_URL overrides in-memory SQLite."""
    return os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine for testing."""
    if database_url.startswith("sqlite"):
        # One shared connection so the in-memory database outlives each checkout
        engine = create_async_engine(database_url, echo=False, poolclass=StaticPool)
        configure_sqlite(engine)
    else:
        engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_connection(async_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection]:
    """
    Create a connection with a transaction that will be rolled back after the test.

    This provides test isolation - each test runs in its own transaction
    that is rolled back, so tests don't affect each other.
    """
    async with async_engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
        finally:
            await transaction.rollback()


@pytest.fixture
async def db_session(db_connection: AsyncConnection) -> AsyncGenerator[AsyncSession]:
    """
    Create an async session bound to the test transaction.

    Uses begin_nested() for savepoints, allowing the session's flush/commit
    to work within our outer test transaction.
    """
    session_factory = async_sessionmaker(
        bind=db_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def prompt_service() -> PromptService:
    """A fresh prompt service."""
    return PromptService()


@pytest.fixture
def github_repo() -> FakeGitHubContents:
    """An empty in-memory GitHub repository."""
    return FakeGitHubContents()


@pytest.fixture
def publish_service(github_repo: FakeGitHubContents) -> PublishService:
    """A publisher writing to the in-memory repository."""
    return PublishService(github_repo)


@pytest.fixture
async def greeting_prompt(db_session: AsyncSession, prompt_service: PromptService) -> Prompt:
    """Create an unpublished prompt with a single version."""
    return await prompt_service.create(
        db_session,
        PromptCreate(
            name="Greeting",
            description="Say hi",
            category="General",
            model="gpt-4o",
            content="Hello!",
        ),
    )


@pytest.fixture
async def client(
    db_session: AsyncSession,
    publish_service: PublishService,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session and GitHub overrides."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    from core.config import get_settings

    get_settings.cache_clear()

    from api.dependencies import get_optional_publish_service
    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_optional_publish_service] = lambda: publish_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
