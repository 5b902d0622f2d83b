from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import models  # noqa: F401
from app.auth import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models import Comment
from app.services import UserService, VideoService


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make_user(username: str, **kwargs):
        return await UserService(db).create(username=username, email=f"{username}@test.com", **kwargs)

    return _make_user


@pytest.fixture
def make_video(db):
    async def _make_video(owner, title: str = "A video", **kwargs):
        return await VideoService(db).publish(
            owner_id=owner.id,
            title=title,
            description=kwargs.pop("description", "Some description"),
            video_url=kwargs.pop("video_url", "https://cdn.test/video.mp4"),
            thumbnail_url=kwargs.pop("thumbnail_url", "https://cdn.test/thumb.png"),
            duration=kwargs.pop("duration", 42.0),
            **kwargs,
        )

    return _make_video


@pytest.fixture
def make_comments(db):
    """Insert comments with strictly increasing created_at, in the given order."""

    async def _make_comments(video, owner, contents, parent_id=None):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        comments = [
            Comment(
                video_id=video.id,
                owner_id=owner.id,
                content=content,
                parent_comment_id=parent_id,
                created_at=base + timedelta(minutes=i),
            )
            for i, content in enumerate(contents)
        ]
        db.add_all(comments)
        await db.commit()
        return comments

    return _make_comments


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice", display_name="Alice")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("bob", display_name="Bob")


@pytest_asyncio.fixture
async def video(make_video, alice):
    return await make_video(alice, title="First upload")


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
