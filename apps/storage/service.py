import asyncio
import logging
import time
from typing import Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from common.exceptions import StorageError
from settings.config import Settings

logger = logging.getLogger(__name__)

# Folder per entity inside the bucket
ENTITY_FOLDERS = {"ordenes_compra", "facturas"}

PDF_CONTENT_TYPE = "application/pdf"


def is_allowed_content_type(content_type: Optional[str]) -> bool:
    """PDFs and any image type are accepted."""
    ct = (content_type or "").lower()
    return ct == PDF_CONTENT_TYPE or ct.startswith("image/")


def file_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    if content_type == PDF_CONTENT_TYPE:
        return "pdf"
    if content_type and content_type.startswith("image/"):
        return content_type.split("/", 1)[1].lower()
    return "bin"


def build_object_key(entity_type: str, identifier: str, extension: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Object path '{entity_type}/{identifier}_{timestamp}.{ext}'.
    """
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{entity_type}/{identifier}_{ts}.{extension}"


class DocumentStorage:
    """
    Uploads supporting documents (PDF/images) to the S3 bucket and returns
    their public URL. The URL is stored as-is in the record's `url_documento`.
    """

    def __init__(self, settings: Settings, client=None, clock: Callable[[], float] = time.time):
        self._settings = settings
        self._client = client
        self._clock = clock

    def _get_client(self):
        """
        Construct a boto3 S3 client using application settings.
        Prefers explicit credentials from settings when provided.
        """
        if self._client is None:
            kwargs: dict = {}
            if self._settings.AWS_REGION:
                kwargs["region_name"] = self._settings.AWS_REGION
            if self._settings.AWS_ACCESS_KEY_ID and self._settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = self._settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = self._settings.AWS_SECRET_ACCESS_KEY
                if self._settings.AWS_SESSION_TOKEN:
                    kwargs["aws_session_token"] = self._settings.AWS_SESSION_TOKEN
            self._client = boto3.client("s3", **kwargs)
        return self._client

    def validate(self, content: bytes, content_type: Optional[str]) -> None:
        if not is_allowed_content_type(content_type):
            raise StorageError("Solo se permiten archivos PDF o imágenes", rejected=True)
        max_bytes = self._settings.MAX_UPLOAD_MB * 1024 * 1024
        if len(content) > max_bytes:
            raise StorageError(f"El archivo excede el tamaño máximo de {self._settings.MAX_UPLOAD_MB} MB", rejected=True)
        if not content:
            raise StorageError("El archivo está vacío", rejected=True)

    async def upload(
        self,
        entity_type: str,
        identifier: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
    ) -> str:
        """
        Upload one document and return its public URL.
        Blocking boto3 I/O is offloaded to a thread.
        """
        if entity_type not in ENTITY_FOLDERS:
            raise StorageError(f"Tipo de entidad desconocido: {entity_type}", rejected=True)
        self.validate(content, content_type)

        bucket = self._settings.AWS_S3_BUCKET
        if not bucket:
            raise StorageError("AWS_S3_BUCKET no está configurado")

        key = build_object_key(
            entity_type, identifier, file_extension(filename, content_type), int(self._clock() * 1000)
        )
        client = self._get_client()

        def _upload() -> str:
            client.put_object(
                Bucket=bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
                CacheControl="max-age=3600",
            )
            # Construct URL using virtual-hosted–style URL
            region = client.meta.region_name or "us-east-1"
            return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"

        try:
            url = await asyncio.to_thread(_upload)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageError("No se pudo subir el archivo. Intente nuevamente.") from exc

        logger.info("Document uploaded to %s", key)
        return url
