"""Tests for the MinIO storage adapter."""

from datetime import timedelta

import pytest
from article_common.exceptions import StorageDeleteError, StorageDownloadError, StorageSigningError

from infrastructure.minio_storage import MinioStorageClient


class FakeMinio:
    def __init__(self, fail=False, buckets=()):
        self.calls = []
        self._fail = fail
        self.buckets = set(buckets)

    def _record(self, name, **kwargs):
        self.calls.append((name, kwargs))
        if self._fail:
            raise ConnectionError("minio down")

    def fget_object(self, **kwargs):
        self._record("fget_object", **kwargs)

    def remove_object(self, **kwargs):
        self._record("remove_object", **kwargs)

    def presigned_put_object(self, **kwargs):
        self._record("presigned_put_object", **kwargs)
        return f"http://minio:9000/{kwargs['bucket_name']}/{kwargs['object_name']}?sig"

    def bucket_exists(self, bucket_name):
        return bucket_name in self.buckets

    def make_bucket(self, bucket_name):
        self.buckets.add(bucket_name)


OBJECT = "uploads/" + "f" * 32 + ".mp3"


class TestMinioStorageClient:
    def test_download_to_file(self):
        minio = FakeMinio()

        MinioStorageClient(minio).download_to_file("uploads", OBJECT, "/tmp/ws/input.mp3")

        assert minio.calls == [
            ("fget_object", {"bucket_name": "uploads", "object_name": OBJECT, "file_path": "/tmp/ws/input.mp3"})
        ]

    def test_presigned_upload_url(self):
        minio = FakeMinio()

        url = MinioStorageClient(minio).presigned_upload_url("uploads", OBJECT, timedelta(hours=1))

        assert url.startswith("http://minio:9000/uploads/")
        assert minio.calls[0][1]["expires"] == timedelta(hours=1)

    @pytest.mark.parametrize(
        "call, error",
        [
            (lambda client: client.download_to_file("uploads", OBJECT, "/tmp/x.mp3"), StorageDownloadError),
            (lambda client: client.delete("uploads", OBJECT), StorageDeleteError),
            (lambda client: client.presigned_upload_url("uploads", OBJECT, timedelta(minutes=5)), StorageSigningError),
        ],
    )
    def test_failures_are_wrapped(self, call, error):
        with pytest.raises(error) as exc_info:
            call(MinioStorageClient(FakeMinio(fail=True)))

        assert exc_info.value.object_name == OBJECT
        assert isinstance(exc_info.value.cause, ConnectionError)

    def test_creates_missing_bucket(self):
        minio = FakeMinio()

        MinioStorageClient(minio).ensure_bucket_exists("uploads")

        assert minio.buckets == {"uploads"}

    def test_keeps_existing_bucket(self):
        minio = FakeMinio(buckets=["uploads"])

        MinioStorageClient(minio).ensure_bucket_exists("uploads")

        assert minio.buckets == {"uploads"}
