"""
Pytest configuration and shared fixtures.

This file provides common fixtures for all tests.

The test database comes from TEST_DATABASE_URL; without it, tests run
against a private in-memory SQLite database (aiosqlite). Tables are created
from SQLModel metadata for every test and dropped afterwards.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  (registers every table with SQLModel.metadata)
from app.config import ImageStatus
from app.core.database import get_db
from app.main import app as main_app
from app.models.image import Images
from app.models.image_type import ImageTypes

# Load .env file at module import time to make TEST_DATABASE_URL available
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _test_engine_kwargs(database_url: str) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        # One shared connection, otherwise every connection gets its own empty in-memory DB
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create test database engine (and schema) for each test function.

    Scope is "function" so the async engine runs in the same event loop as
    the function-scoped db_session fixture.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL, echo=False, **_test_engine_kwargs(TEST_DATABASE_URL)
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test."""
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def app(db_session: AsyncSession) -> FastAPI:
    """
    Create FastAPI app with test database session.

    This overrides the database dependency to use the test session.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/api/v1/images")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_image_data() -> dict:
    """Sample image column values; override per test as needed."""
    return {
        "uploaded_by_user_id": 1,
        "upload_time": 1_000,
        "published_by_user_id": 0,
        "publish_time": 0,
        "verified_by_user_id": 0,
        "verify_time": 0,
        "original_file_name": "sample.png",
        "original_image_filename": "sample-original.png",
        "thumbnail_image_filename": "sample-thumbnail.jpeg",
        "description": "",
        "image_type_id": None,
        "status": ImageStatus.UPLOADED,
    }


@pytest.fixture
def create_image(
    db_session: AsyncSession, sample_image_data: dict
) -> Callable[..., Awaitable[Images]]:
    """
    Factory fixture that inserts an image row.

    Usage:
        image = await create_image(image_id=3, upload_time=20)
    """

    async def _create_image(**overrides: Any) -> Images:
        image = Images(**{**sample_image_data, **overrides})
        db_session.add(image)
        await db_session.commit()
        await db_session.refresh(image)
        return image

    return _create_image


@pytest.fixture
def create_image_type(db_session: AsyncSession) -> Callable[..., Awaitable[ImageTypes]]:
    """Factory fixture that inserts an image type row."""

    async def _create_image_type(
        image_type_id: int, display_name: str = "type", has_predictive_model: bool = False
    ) -> ImageTypes:
        image_type = ImageTypes(
            image_type_id=image_type_id,
            display_name=display_name,
            has_predictive_model=has_predictive_model,
        )
        db_session.add(image_type)
        await db_session.commit()
        return image_type

    return _create_image_type


@pytest.fixture
async def upload_time_images(create_image) -> None:
    """Five images, ids 1..5, uploaded at 10, 20, 20, 30, 40."""
    for image_id, upload_time in zip(range(1, 6), [10, 20, 20, 30, 40]):
        await create_image(
            image_id=image_id,
            upload_time=upload_time,
            original_image_filename=f"{image_id}.png",
            thumbnail_image_filename=f"{image_id}.jpeg",
        )
