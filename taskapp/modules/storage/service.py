import uuid
import boto3
from botocore.exceptions import ClientError
from supabase import Client
from taskapp.config import settings
from taskapp.core.errors import storage_error
import logging

logger = logging.getLogger(__name__)


def build_object_name(owner_id: str, filename: str) -> str:
    """<owner_id>/<uuid>.<ext>; the extension is taken from the uploaded filename"""
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "bin"
    return f"{owner_id}/{uuid.uuid4().hex}.{ext}"


class SupabaseStorage:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upload_file(self, bucket: str, key: str, file_content: bytes, content_type: str) -> str:
        """Upload to a Supabase Storage bucket and return its public URL"""
        bucket_api = self.supabase.storage.from_(bucket)
        bucket_api.upload(key, file_content, {"content-type": content_type})
        return bucket_api.get_public_url(key)


class S3Storage:
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, bucket: str, key: str, file_content: bytes, content_type: str) -> str:
        """Upload under the logical bucket prefix and return the public object URL"""
        object_key = f"{bucket}/{key}"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=object_key,
                Body=file_content,
                ContentType=content_type
            )
            return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{object_key}"
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise


class StorageService:
    """Uploads proofs and avatars; any backend failure becomes a 502 before the caller mutates rows."""

    def __init__(self, backend):
        self.backend = backend

    def upload(
        self,
        bucket: str,
        owner_id: str,
        filename: str,
        file_content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        key = build_object_name(owner_id, filename)
        try:
            url = self.backend.upload_file(bucket, key, file_content, content_type)
        except Exception as e:
            raise storage_error(e)
        logger.info(f"Uploaded {bucket}/{key}")
        return url


def create_storage(supabase: Client) -> StorageService:
    if settings.storage_backend == "s3":
        return StorageService(S3Storage())
    return StorageService(SupabaseStorage(supabase))
