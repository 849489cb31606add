import io
import os
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlmodel import SQLModel

# Point the app at a throwaway SQLite DB and storage directory BEFORE importing
# any app module: the engine and settings are created at import time.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="seva_tests_"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["LOCAL_STORAGE_PATH"] = str(_TEST_ROOT / "storage")
os.environ["APP_ENV"] = "test"
os.environ["MAX_UPLOAD_MB"] = "1"

from seva_backend import database  # noqa: E402
from seva_backend import models  # noqa: E402,F401
from seva_backend.config import get_settings  # noqa: E402
from seva_backend.services import ActivityService, ComplaintService  # noqa: E402
from seva_backend.storage import LocalMediaStore  # noqa: E402


def create_test_image(width=800, height=600, fmt="JPEG", color="red", mode="RGB") -> bytes:
    """Create a small in-memory image for upload."""
    img = Image.new(mode, (width, height), color=color if mode == "RGB" else 0)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Return a factory producing encoded test images."""
    return create_test_image


@pytest_asyncio.fixture
async def db():
    """Recreate all tables so every test starts from an empty database."""
    async with database.engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield database.engine


@pytest_asyncio.fixture
async def session(db):
    async with database.async_session_factory() as session:
        yield session


@pytest.fixture
def media_store(tmp_path) -> LocalMediaStore:
    return LocalMediaStore(str(tmp_path / "media"), prefix="seva-complaints")


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def complaint_service(session, media_store, settings) -> ComplaintService:
    return ComplaintService(session, media_store, settings)


@pytest.fixture
def activity_service(session) -> ActivityService:
    return ActivityService(session)


@pytest_asyncio.fixture
async def client(db, settings):
    """HTTP client bound to the ASGI app (lifespan is not run; state set here)."""
    from seva_backend.main import app, mount_local_media

    app.state.media_store = LocalMediaStore(
        settings.local_storage_path, prefix=settings.media_prefix
    )
    mount_local_media(app, app.state.media_store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
