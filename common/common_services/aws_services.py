import mimetypes
import uuid

import aioboto3
from botocore.config import Config

from app_logging import app_logger
from common.enums import DocumentType
from config import app_config


def build_document_key(user_id: int | str, document_type: DocumentType | str, file_name: str) -> str:
    doc_type = document_type.value if isinstance(document_type, DocumentType) else str(document_type)
    safe_name = file_name.replace("/", "_").replace(" ", "_")
    return f"kyc/{user_id}/{doc_type}/{uuid.uuid4().hex}_{safe_name}"


def build_profile_image_key(user_id: int | str, file_name: str) -> str:
    safe_name = file_name.replace("/", "_").replace(" ", "_")
    return f"profile_images/{user_id}/{uuid.uuid4().hex}_{safe_name}"


def user_key_prefix(user_id: int | str) -> str:
    return f"kyc/{user_id}/"


class AWSClient:
    """Handles AWS authentication and S3 client creation."""

    def __init__(self):
        self.AWS_ACCESS_KEY = app_config.AWS_ACCESS_KEY
        self.AWS_SECRET_KEY = app_config.AWS_SECRET_KEY
        self.AWS_REGION = app_config.AWS_REGION
        self.S3_BUCKET_NAME = app_config.AWS_BUCKET_NAME

    @property
    def is_configured(self) -> bool:
        return bool(self.S3_BUCKET_NAME and self.AWS_ACCESS_KEY and self.AWS_SECRET_KEY)

    def get_s3_client(self):
        """Returns an async S3 client context manager."""
        session = aioboto3.Session()
        return session.client(
            "s3", aws_access_key_id=self.AWS_ACCESS_KEY, aws_secret_access_key=self.AWS_SECRET_KEY,
            region_name=self.AWS_REGION, config=Config(signature_version='s3v4')
        )

    async def upload_to_s3(self, s3_key: str, binary_data: bytes) -> dict:
        """Uploads a file to S3 and returns the object key and URL."""
        content_type, _ = mimetypes.guess_type(s3_key)
        content_type = content_type or "application/octet-stream"

        async with self.get_s3_client() as s3_client:
            await s3_client.put_object(
                Bucket=self.S3_BUCKET_NAME,
                Key=s3_key,
                Body=binary_data,
                ContentType=content_type
            )

        app_logger.info(f"Uploaded {len(binary_data)} bytes to s3://{self.S3_BUCKET_NAME}/{s3_key}")
        s3_object_url = f"https://{self.S3_BUCKET_NAME}.s3.{self.AWS_REGION}.amazonaws.com/{s3_key}"
        return {"key": s3_key, "s3_object_url": s3_object_url}

    async def generate_presigned_url(self, s3_key: str, expires_in: int | None = None) -> str:
        async with self.get_s3_client() as s3_client:
            return await s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.S3_BUCKET_NAME, "Key": s3_key},
                ExpiresIn=expires_in or app_config.PRESIGNED_URL_EXPIRY_SECONDS,
            )
