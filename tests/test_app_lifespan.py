"""Startup wiring: media store selection and the `/storage` mount."""

from dataclasses import replace

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from seva_backend import main
from seva_backend.storage import build_media_store
from seva_backend.storage_s3 import S3MediaStore


def _broken_s3(self, settings):
    raise RuntimeError("no credentials")


def _has_storage_mount(app: FastAPI) -> bool:
    return any(getattr(route, "name", None) == "storage" for route in app.routes)


def test_fallback_store_is_mounted(settings, monkeypatch):
    monkeypatch.setattr(S3MediaStore, "__init__", _broken_s3)
    app = FastAPI()

    store = build_media_store(replace(settings, storage_provider="s3"))
    main.mount_local_media(app, store)

    assert store.provider == "local"
    assert _has_storage_mount(app)


def test_remote_store_is_not_mounted():
    class RemoteStore:
        provider = "s3"

    app = FastAPI()
    main.mount_local_media(app, RemoteStore())
    assert not _has_storage_mount(app)


@pytest.mark.asyncio
async def test_lifespan_serves_images_after_s3_fallback(db, settings, monkeypatch, make_image):
    monkeypatch.setattr(S3MediaStore, "__init__", _broken_s3)
    monkeypatch.setattr(main, "settings", replace(settings, storage_provider="s3"))
    image = make_image(40, 40)

    async with main.lifespan(main.app):
        store = main.app.state.media_store
        assert store.provider == "local"
        assert _has_storage_mount(main.app)

        stored = await store.store(image, "before", "fallback.jpg", "image/jpeg")
        transport = ASGITransport(app=main.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(stored.url)

    assert response.status_code == 200
    assert response.content == image
