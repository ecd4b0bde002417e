"""Tests for upload validation and the storage backends."""

import re
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from pdfshare.core.errors import (
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationFailedError,
)
from pdfshare.core.storage import LocalStorage, S3Storage, build_storage, generate_key, validate_pdf_upload
from pdfshare.server.core.config import Settings

PDF = b"%PDF-1.7\n%%EOF\n"


class TestValidatePdfUpload:
    def test_accepts_pdf(self):
        validate_pdf_upload(PDF, "a.pdf", "application/pdf", max_bytes=1024)

    def test_accepts_pdf_extension_with_generic_content_type(self):
        validate_pdf_upload(PDF, "a.PDF", "application/octet-stream", max_bytes=1024)

    def test_empty(self):
        with pytest.raises(ValidationFailedError, match="No file uploaded"):
            validate_pdf_upload(b"", "a.pdf", "application/pdf", max_bytes=1024)

    def test_too_large(self):
        with pytest.raises(PayloadTooLargeError):
            validate_pdf_upload(PDF, "a.pdf", "application/pdf", max_bytes=len(PDF) - 1)

    @pytest.mark.parametrize(
        "data,filename,content_type",
        [
            (PDF, "a.txt", "text/plain"),
            (b"hello", "a.pdf", "application/pdf"),
            (PDF, None, None),
        ],
    )
    def test_not_a_pdf(self, data, filename, content_type):
        with pytest.raises(UnsupportedMediaTypeError, match="Only PDF files are allowed"):
            validate_pdf_upload(data, filename, content_type, max_bytes=1024)


def test_generate_key_layout():
    key = generate_key("Report.PDF")
    assert re.fullmatch(r"pdfs/\d+-[0-9a-f-]{36}\.pdf", key)
    assert generate_key("a.pdf") != generate_key("a.pdf")


@pytest.mark.asyncio
class TestLocalStorage:
    async def test_save_open_delete(self, tmp_path):
        storage = LocalStorage(tmp_path)

        key = await storage.save(PDF, "doc.pdf")

        assert await storage.exists(key)
        assert await storage.open(key) == PDF
        await storage.delete(key)
        assert not await storage.exists(key)
        await storage.delete(key)

    async def test_missing_file(self, tmp_path):
        with pytest.raises(StorageError, match="Stored file is missing"):
            await LocalStorage(tmp_path).open("pdfs/missing.pdf")

    async def test_rejects_keys_outside_root(self, tmp_path):
        with pytest.raises(StorageError):
            await LocalStorage(tmp_path / "root").open("../escape.pdf")

    async def test_no_download_url(self, tmp_path):
        assert LocalStorage(tmp_path).download_url("pdfs/x.pdf") is None


@pytest.mark.asyncio
class TestS3Storage:
    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def storage(self, client):
        return S3Storage(bucket="docs", region="eu-west-1", client=client)

    async def test_save(self, storage, client):
        key = await storage.save(PDF, "doc.pdf")

        client.put_object.assert_called_once()
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "docs"
        assert kwargs["Key"] == key
        assert kwargs["Body"] == PDF
        assert kwargs["ContentType"] == "application/pdf"

    async def test_save_failure(self, storage, client):
        client.put_object.side_effect = ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        with pytest.raises(StorageError, match="Failed to store file"):
            await storage.save(PDF, "doc.pdf")

    async def test_open(self, storage, client):
        body = MagicMock()
        body.read.return_value = PDF
        client.get_object.return_value = {"Body": body}
        assert await storage.open("pdfs/a.pdf") == PDF

    async def test_open_missing(self, storage, client):
        client.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey", "Message": "gone"}}, "GetObject")
        with pytest.raises(StorageError, match="Stored file is missing"):
            await storage.open("pdfs/a.pdf")

    async def test_delete_failure_is_logged(self, storage, client):
        client.delete_object.side_effect = ClientError({"Error": {"Code": "500", "Message": "x"}}, "DeleteObject")
        await storage.delete("pdfs/a.pdf")

    async def test_exists(self, storage, client):
        assert await storage.exists("pdfs/a.pdf")
        client.head_object.side_effect = ClientError({"Error": {"Code": "404", "Message": "x"}}, "HeadObject")
        assert not await storage.exists("pdfs/a.pdf")

    async def test_urls(self, storage, client):
        client.generate_presigned_url.return_value = "https://signed"
        assert storage.download_url("pdfs/a.pdf") == "https://signed"
        assert storage.public_url("pdfs/a.pdf") == "https://docs.s3.eu-west-1.amazonaws.com/pdfs/a.pdf"
        custom = S3Storage(bucket="docs", bucket_url="https://cdn.example.com/", client=client)
        assert custom.public_url("pdfs/a.pdf") == "https://cdn.example.com/pdfs/a.pdf"


def test_build_storage_local(tmp_path):
    settings = Settings(STORAGE_BACKEND="local", FILE_UPLOAD_PATH=str(tmp_path))
    storage = build_storage(settings)
    assert isinstance(storage, LocalStorage)
    assert storage.root == tmp_path.resolve()


def test_build_storage_s3_requires_bucket():
    with pytest.raises(ValueError):
        build_storage(Settings(STORAGE_BACKEND="s3"))
