"""S3 media store tests against moto's in-memory S3."""

from dataclasses import replace

import boto3
import pytest
from moto import mock_aws

from seva_backend.errors import StorageError
from seva_backend.storage import build_media_store
from seva_backend.storage_s3 import S3MediaStore

BUCKET = "test-seva-media"


@pytest.fixture
def s3_settings(settings, monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    return replace(
        settings,
        storage_provider="s3",
        s3_bucket=BUCKET,
        s3_region="us-east-1",
        s3_endpoint=None,
        s3_access_key_id="testing",
        s3_secret_access_key="testing",
        kms_key_id=None,
        cloudfront_domain=None,
        media_public_url=None,
    )


@pytest.fixture
def aws():
    with mock_aws():
        yield boto3.client("s3", region_name="us-east-1")


@pytest.mark.asyncio
async def test_store_and_delete(aws, s3_settings):
    store = S3MediaStore(s3_settings)
    store.ensure_bucket()

    stored = await store.store(b"jpeg-bytes", "before", "complaint_1.jpg", "image/jpeg")

    assert stored.key == "seva-complaints/before/complaint_1.jpg"
    assert stored.url == f"https://{BUCKET}.s3.us-east-1.amazonaws.com/{stored.key}"
    obj = aws.get_object(Bucket=BUCKET, Key=stored.key)
    assert obj["Body"].read() == b"jpeg-bytes"
    assert obj["ContentType"] == "image/jpeg"

    await store.delete(stored.key)
    listing = aws.list_objects_v2(Bucket=BUCKET)
    assert listing.get("KeyCount", 0) == 0


@pytest.mark.asyncio
async def test_store_into_missing_bucket_raises(aws, s3_settings):
    store = S3MediaStore(s3_settings)
    with pytest.raises(StorageError):
        await store.store(b"x", "after", "a.jpg", "image/jpeg")


def test_url_precedence(aws, s3_settings):
    assert S3MediaStore(replace(s3_settings, cloudfront_domain="cdn.example.org")).url_for("k.jpg") == (
        "https://cdn.example.org/k.jpg"
    )
    assert S3MediaStore(replace(s3_settings, media_public_url="https://media.example.org/")).url_for(
        "k.jpg"
    ) == "https://media.example.org/k.jpg"
    assert S3MediaStore(replace(s3_settings, s3_endpoint="http://minio:9000")).url_for("k.jpg") == (
        f"http://minio:9000/{BUCKET}/k.jpg"
    )


def test_ensure_bucket_creates_once(aws, s3_settings):
    store = S3MediaStore(s3_settings)
    store.ensure_bucket()
    store.ensure_bucket()

    names = [b["Name"] for b in aws.list_buckets()["Buckets"]]
    assert names == [BUCKET]


def test_build_media_store_selects_s3(aws, s3_settings):
    store = build_media_store(s3_settings)
    assert store.provider == "s3"
    assert isinstance(store, S3MediaStore)


def test_build_media_store_defaults_to_local(settings):
    store = build_media_store(settings)
    assert store.provider == "local"
