"""
Tests for the image storage backends.

Local storage writes into a temporary directory; S3 calls are answered by a
botocore Stubber so no network or credentials are needed.
"""

from pathlib import Path

import boto3
import pytest
from botocore.stub import ANY, Stubber

from adapters.storage_adapter import (
    LocalStorageBackend,
    S3StorageBackend,
    PLACEHOLDER_SVG,
    build_storage_backend,
    image_extension,
    install_placeholder,
)
from app.exceptions import (
    PayloadTooLargeError,
    ServiceValidationError,
    StorageUnavailableError,
    UnsupportedMediaTypeError,
)
from test_fixtures import GIF_BYTES, JPEG_BYTES, PNG_BYTES, build_settings

BUCKET = "kitchen-hand-guide"
REGION = "ap-southeast-2"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name=REGION,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


# =============================================================================
# VALIDATION
# =============================================================================


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("photo.jpg", "jpg"),
        ("PHOTO.JPEG", "jpeg"),
        ("dish.png", "png"),
        ("dish.webp", "webp"),
        ("anim.gif", None),
        ("noextension", None),
        ("", None),
    ],
)
def test_image_extension(filename, expected):
    assert image_extension(filename) == expected


def test_local_store_writes_file_and_returns_url(storage: LocalStorageBackend):
    """
    Verifies:
    - the stored file has a fresh name with the original extension
    - the bytes on disk match the upload
    - the returned reference is under the upload URL prefix
    """
    url = storage.store(JPEG_BYTES, "Tomatoes.JPG")

    assert url.startswith("/static/uploads/")
    assert url.endswith(".jpg")
    stored = list(storage.upload_dir.iterdir())
    assert len(stored) == 1
    assert stored[0].name == url.rsplit("/", 1)[-1]
    assert stored[0].read_bytes() == JPEG_BYTES


def test_local_store_names_never_collide(storage: LocalStorageBackend):
    urls = {storage.store(PNG_BYTES, "same.png") for _ in range(3)}
    assert len(urls) == 3


def test_gif_rejected_before_anything_is_written(storage: LocalStorageBackend):
    with pytest.raises(UnsupportedMediaTypeError) as exc_info:
        storage.store(GIF_BYTES, "anim.gif")

    assert exc_info.value.http_status == 415
    assert not storage.upload_dir.exists() or list(storage.upload_dir.iterdir()) == []


def test_oversized_upload_rejected(tmp_path):
    backend = LocalStorageBackend(str(tmp_path / "uploads"), "/static/uploads", max_bytes=16)

    with pytest.raises(PayloadTooLargeError) as exc_info:
        backend.store(JPEG_BYTES, "big.jpg")

    assert exc_info.value.http_status == 413
    assert "exceeds maximum allowed size (16 bytes)" in exc_info.value.message
    assert not (tmp_path / "uploads").exists()


def test_upload_at_exact_limit_accepted(tmp_path):
    backend = LocalStorageBackend(
        str(tmp_path / "uploads"), "/static/uploads", max_bytes=len(JPEG_BYTES)
    )
    assert backend.store(JPEG_BYTES, "exact.jpg").endswith(".jpg")


def test_empty_upload_rejected(storage: LocalStorageBackend):
    with pytest.raises(ServiceValidationError):
        storage.store(b"", "empty.png")


def test_local_store_failure_is_storage_unavailable(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    backend = LocalStorageBackend(str(blocker), "/static/uploads", max_bytes=1024)

    with pytest.raises(StorageUnavailableError):
        backend.store(JPEG_BYTES, "photo.jpg")


def test_local_retrieve_url(storage: LocalStorageBackend):
    assert storage.retrieve_url("abc.png") == "/static/uploads/abc.png"
    assert storage.retrieve_url("/static/uploads/abc.png") == "/static/uploads/abc.png"
    assert storage.retrieve_url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"


# =============================================================================
# S3 BACKEND
# =============================================================================


def test_s3_store_puts_object_with_content_type(s3_client):
    backend = S3StorageBackend(BUCKET, REGION, max_bytes=1024, client=s3_client)

    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "put_object",
            {},
            {"Bucket": BUCKET, "Key": ANY, "Body": PNG_BYTES, "ContentType": "image/png"},
        )
        url = backend.store(PNG_BYTES, "plated.png")
        stubber.assert_no_pending_responses()

    assert url.startswith(f"https://{BUCKET}.s3.{REGION}.amazonaws.com/uploads/")
    assert url.endswith(".png")


def test_s3_client_error_is_storage_unavailable(s3_client):
    backend = S3StorageBackend(BUCKET, REGION, max_bytes=1024, client=s3_client)

    with Stubber(s3_client) as stubber:
        stubber.add_client_error(
            "put_object", service_error_code="AccessDenied", http_status_code=403
        )
        with pytest.raises(StorageUnavailableError):
            backend.store(JPEG_BYTES, "photo.jpg")


def test_s3_validation_happens_before_upload(s3_client):
    backend = S3StorageBackend(BUCKET, REGION, max_bytes=1024, client=s3_client)

    # No responses queued: any put_object call would fail the stubber
    with Stubber(s3_client):
        with pytest.raises(UnsupportedMediaTypeError):
            backend.store(GIF_BYTES, "anim.gif")


def test_build_storage_backend_picks_local_by_default(tmp_path):
    backend = build_storage_backend(build_settings(tmp_path))

    assert isinstance(backend, LocalStorageBackend)
    assert backend.upload_dir == Path(tmp_path / "static" / "uploads")


def test_build_storage_backend_picks_s3_when_enabled(tmp_path):
    settings = build_settings(
        tmp_path, s3_enabled=True, s3_bucket_name="prep-photos", aws_region="eu-west-1"
    )

    backend = build_storage_backend(settings)

    assert isinstance(backend, S3StorageBackend)
    assert backend.bucket == "prep-photos"
    assert backend.region == "eu-west-1"
    assert backend.max_bytes == settings.max_upload_bytes
    assert backend.retrieve_url("uploads/a.png") == (
        "https://prep-photos.s3.eu-west-1.amazonaws.com/uploads/a.png"
    )


# =============================================================================
# PLACEHOLDER IMAGE
# =============================================================================


def test_install_placeholder_writes_svg_once(tmp_path):
    target = install_placeholder(str(tmp_path), "/static/placeholder.svg")

    assert target == tmp_path / "placeholder.svg"
    assert target.read_text(encoding="utf-8") == PLACEHOLDER_SVG

    # An operator's own file is left alone
    target.write_text("<svg/>", encoding="utf-8")
    install_placeholder(str(tmp_path), "/static/placeholder.svg")
    assert target.read_text(encoding="utf-8") == "<svg/>"


@pytest.mark.parametrize(
    "url",
    ["https://cdn.example.com/placeholder.svg", "/static/uploads/placeholder.jpg"],
)
def test_install_placeholder_only_generates_local_svg(tmp_path, url):
    assert install_placeholder(str(tmp_path), url) is None
    assert list(tmp_path.iterdir()) == []
