"""Local to S3 image migration against moto's in-memory S3."""

from dataclasses import replace

import boto3
import pytest
from moto import mock_aws

from seva_backend.media_migration import migrate_local_media
from seva_backend.models import Complaint
from seva_backend.storage import LocalMediaStore
from seva_backend.storage_s3 import S3MediaStore

BUCKET = "test-seva-migration"


@pytest.fixture
def s3_store(settings, monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    s3_settings = replace(
        settings,
        s3_bucket=BUCKET,
        s3_region="us-east-1",
        s3_endpoint=None,
        s3_access_key_id="testing",
        s3_secret_access_key="testing",
        kms_key_id=None,
        cloudfront_domain=None,
        media_public_url=None,
    )
    with mock_aws():
        store = S3MediaStore(s3_settings)
        store.ensure_bucket()
        yield store


async def _complaint_with_local_image(session, local, data):
    stored = await local.store(data, "before", "old.jpg", "image/jpeg")
    complaint = Complaint(
        phone_number="9000000000",
        category="water",
        description="Leak",
        image_before=stored.url,
        image_before_key=stored.key,
    )
    session.add(complaint)
    await session.commit()
    await session.refresh(complaint)
    return complaint, stored


@pytest.mark.asyncio
async def test_migrate_uploads_and_rewrites_urls(session, tmp_path, s3_store, make_image):
    local = LocalMediaStore(str(tmp_path / "local"), prefix="seva-complaints")
    data = make_image(30, 30)
    complaint, stored = await _complaint_with_local_image(session, local, data)
    remote_only = Complaint(
        phone_number="9000000001",
        category="roads",
        description="Pothole",
        image_after="https://cdn.example.org/x.jpg",
        image_after_key="seva-complaints/after/x.jpg",
    )
    session.add(remote_only)
    await session.commit()

    migrated = await migrate_local_media(local.base_dir, s3_store)

    assert migrated == 1
    await session.refresh(complaint)
    assert complaint.image_before == f"https://{BUCKET}.s3.us-east-1.amazonaws.com/{stored.key}"
    assert complaint.image_before_key == stored.key

    s3 = boto3.client("s3", region_name="us-east-1")
    obj = s3.get_object(Bucket=BUCKET, Key=stored.key)
    assert obj["Body"].read() == data
    assert obj["ContentType"] == "image/jpeg"

    # already remote; nothing left to do
    assert await migrate_local_media(local.base_dir, s3_store) == 0


@pytest.mark.asyncio
async def test_migrate_dry_run_changes_nothing(session, tmp_path, s3_store, make_image):
    local = LocalMediaStore(str(tmp_path / "local"), prefix="seva-complaints")
    complaint, stored = await _complaint_with_local_image(session, local, make_image(30, 30))

    assert await migrate_local_media(local.base_dir, s3_store, dry_run=True) == 1

    await session.refresh(complaint)
    assert complaint.image_before == stored.url
    listing = boto3.client("s3", region_name="us-east-1").list_objects_v2(Bucket=BUCKET)
    assert listing.get("KeyCount", 0) == 0
