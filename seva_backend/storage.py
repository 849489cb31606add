"""
Media storage for complaint images.

`MediaStore` is the interface the complaint service talks to. The local
provider writes under `LOCAL_STORAGE_PATH` (served by the app at `/storage`);
the S3 provider lives in `storage_s3.py`. `build_media_store()` picks one from
settings and is called once per process from the application lifespan.
"""

from dataclasses import dataclass
from pathlib import Path
import logging

from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .errors import StorageError

logger = logging.getLogger("seva.storage")

LOCAL_URL_PREFIX = "/storage"


@dataclass(frozen=True)
class StoredMedia:
    """Public reference to a stored image plus the key used to delete it."""

    url: str
    key: str


class MediaStore:
    provider = "none"

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix.strip("/")

    def build_key(self, namespace: str, name: str) -> str:
        parts = [p for p in (self.prefix, namespace.strip("/"), name) if p]
        return "/".join(parts)

    async def store(self, data: bytes, namespace: str, name: str, content_type: str) -> StoredMedia:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class LocalMediaStore(MediaStore):
    """Filesystem storage for development and single-host deployments."""

    provider = "local"

    def __init__(self, base_dir: str, prefix: str = "", public_base_url: str = "") -> None:
        super().__init__(prefix)
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _get_path(self, key: str) -> Path:
        clean_key = key.lstrip("/").replace("\\", "/")
        path = (self.base_dir / clean_key).resolve()
        if self.base_dir not in path.parents:
            raise StorageError(f"Refusing to touch path outside storage root: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}{LOCAL_URL_PREFIX}/{key}"

    async def store(self, data: bytes, namespace: str, name: str, content_type: str) -> StoredMedia:
        key = self.build_key(namespace, name)
        path = self._get_path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await run_in_threadpool(_write)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc

        logger.info("Stored image locally: %s (%d bytes)", path, len(data))
        return StoredMedia(url=self.url_for(key), key=key)

    async def delete(self, key: str) -> None:
        path = self._get_path(key)
        try:
            await run_in_threadpool(path.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        logger.info("Deleted local image %s", key)


def build_media_store(settings: Settings) -> MediaStore:
    """Create the configured media store, falling back to local storage when S3
    cannot be initialised."""
    if settings.storage_provider == "s3":
        from .storage_s3 import S3MediaStore

        try:
            store = S3MediaStore(settings)
            store.ensure_bucket()
        except Exception as exc:
            logger.error(
                "Failed to initialize S3 storage, falling back to local filesystem: %s", exc
            )
        else:
            logger.info("Storage initialized (provider=s3, bucket=%s)", settings.s3_bucket)
            return store

    store = LocalMediaStore(
        settings.local_storage_path,
        prefix=settings.media_prefix,
        public_base_url=settings.public_base_url,
    )
    logger.info("Storage initialized (provider=local, path=%s)", store.base_dir)
    return store


__all__ = ["MediaStore", "LocalMediaStore", "StoredMedia", "build_media_store"]
