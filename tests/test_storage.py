"""Document uploads go through an injected fake S3 client."""

import pytest
from botocore.exceptions import ClientError

from apps.storage.service import DocumentStorage, build_object_key, file_extension, is_allowed_content_type
from common.exceptions import StorageError

from conftest import FakeS3Client


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def storage(settings, fake_s3):
    return DocumentStorage(settings, client=fake_s3, clock=lambda: 1715000000.0)


class TestHelpers:
    @pytest.mark.parametrize(
        "content_type,allowed",
        [("application/pdf", True), ("image/png", True), ("IMAGE/JPEG", True), ("text/plain", False), (None, False)],
    )
    def test_content_types(self, content_type, allowed):
        assert is_allowed_content_type(content_type) is allowed

    def test_extension_prefers_filename(self):
        assert file_extension("Factura.PDF", "image/png") == "pdf"
        assert file_extension(None, "image/jpeg") == "jpeg"
        assert file_extension("scan", "application/pdf") == "pdf"

    def test_object_key(self):
        assert build_object_key("facturas", "abc", "pdf", 42) == "facturas/abc_42.pdf"


class TestUpload:
    async def test_upload_returns_public_url(self, storage, fake_s3):
        url = await storage.upload("ordenes_compra", "id-1", "oc.pdf", b"%PDF-1.4", "application/pdf")

        assert url == "https://documentos-test.s3.sa-east-1.amazonaws.com/ordenes_compra/id-1_1715000000000.pdf"
        assert len(fake_s3.calls) == 1
        call = fake_s3.calls[0]
        assert call["Bucket"] == "documentos-test"
        assert call["Key"] == "ordenes_compra/id-1_1715000000000.pdf"
        assert call["ContentType"] == "application/pdf"

    async def test_rejects_other_content_types(self, storage, fake_s3):
        with pytest.raises(StorageError) as exc:
            await storage.upload("facturas", "id-1", "notas.txt", b"hola", "text/plain")

        assert exc.value.rejected is True
        assert fake_s3.calls == []

    async def test_rejects_large_files(self, settings, fake_s3):
        settings.MAX_UPLOAD_MB = 1
        storage = DocumentStorage(settings, client=fake_s3)

        with pytest.raises(StorageError) as exc:
            await storage.upload("facturas", "id-1", "big.pdf", b"0" * (1024 * 1024 + 1), "application/pdf")

        assert exc.value.rejected is True

    async def test_rejects_empty_files(self, storage):
        with pytest.raises(StorageError):
            await storage.upload("facturas", "id-1", "empty.pdf", b"", "application/pdf")

    async def test_unknown_entity_folder(self, storage):
        with pytest.raises(StorageError):
            await storage.upload("usuarios", "id-1", "x.pdf", b"x", "application/pdf")

    async def test_missing_bucket(self, settings, fake_s3):
        settings.AWS_S3_BUCKET = None
        storage = DocumentStorage(settings, client=fake_s3)

        with pytest.raises(StorageError) as exc:
            await storage.upload("facturas", "id-1", "x.pdf", b"x", "application/pdf")

        assert exc.value.rejected is False

    async def test_client_errors_are_wrapped(self, settings):
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        storage = DocumentStorage(settings, client=FakeS3Client(error=error))

        with pytest.raises(StorageError) as exc:
            await storage.upload("facturas", "id-1", "x.pdf", b"x", "application/pdf")

        assert exc.value.message == "No se pudo subir el archivo. Intente nuevamente."
        assert exc.value.rejected is False
