"""S3 object store gateway for photo blobs and signed URLs."""
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional, Dict, List, Any, Iterable
from uuid import UUID
import uuid
import logging

from homerecall.core.exceptions import (
    StorageError,
    UploadError,
    DownloadError,
    DeleteError,
    InvalidPathError,
)
from homerecall.utils.validators import UploadPolicy, validate_upload_file

logger = logging.getLogger(__name__)

DELETE_BATCH_SIZE = 1000
NOT_FOUND_CODES = {'NoSuchKey', '404', 'NotFound'}


def create_s3_client(settings):
    """
    Build the process-wide boto3 S3 client.

    Path-style addressing is used when a custom endpoint (MinIO, LocalStack)
    is configured.
    """
    try:
        return boto3.client(
            's3',
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path' if settings.S3_ENDPOINT_URL else 'virtual'}
            )
        )
    except (BotoCoreError, ValueError) as e:
        logger.error(f"Failed to initialize S3 client: {e}")
        raise StorageError(f"S3 initialization failed: {str(e)}", cause=e)


def recall_case_prefix(case_id: UUID) -> str:
    return f"recall_cases/{case_id}"


def recall_log_prefix(case_id: UUID, log_id: UUID) -> str:
    return f"{recall_case_prefix(case_id)}/logs/{log_id}"


def showing_prefix(showing_id: UUID) -> str:
    return str(showing_id)


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def _is_blank(path: Optional[str]) -> bool:
    return not path or not path.strip()


class ObjectStoreGateway:
    """Blob operations on one bucket, bound to that bucket's upload policy."""

    def __init__(self, client, bucket_name: str, policy: UploadPolicy):
        """
        Initialize gateway.

        Args:
            client: boto3 S3 client (or a test double with the same methods)
            bucket_name: Target bucket
            policy: Size, type, count and TTL limits for this bucket
        """
        self.client = client
        self.bucket_name = bucket_name
        self.policy = policy

    def generate_key(self, prefix: str, filename: Optional[str]) -> str:
        """
        Generate unique object key for an upload.

        Args:
            prefix: Entity prefix, e.g. recall_cases/{case_id}/logs/{log_id}
            filename: Original filename; only its extension is kept

        Returns:
            Object key: {prefix}/{uuid}.{ext}
        """
        file_ext = 'jpg'
        if filename and '.' in filename:
            candidate = filename.rsplit('.', 1)[-1].lower()
            if candidate.isalnum():
                file_ext = candidate

        return f"{prefix.strip('/')}/{uuid.uuid4()}.{file_ext}"

    def validate(self, filename: str, size: int, content_type: Optional[str]) -> None:
        validate_upload_file(filename, size, content_type, self.policy)

    def upload(
        self,
        file_data: bytes,
        path: str,
        content_type: str,
        filename: Optional[str] = None
    ) -> str:
        """
        Store bytes at a new path. Never overwrites an existing object.

        Args:
            file_data: File content
            path: Destination object key
            content_type: MIME type
            filename: Original filename for validation messages

        Returns:
            The stored path

        Raises:
            ValidationError: Size or type outside the policy
            InvalidPathError: Blank destination path
            UploadError: Transport failure or existing object at path
        """
        self.validate(filename or path.rsplit('/', 1)[-1], len(file_data), content_type)

        if _is_blank(path):
            raise InvalidPathError("Invalid storage path provided")

        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=path,
                Body=file_data,
                ContentType=content_type,
                IfNoneMatch='*'
            )
        except ClientError as e:
            if _error_code(e) in ('PreconditionFailed', 'ConditionalRequestConflict'):
                logger.error(f"Refusing to overwrite existing object: {path}")
                raise UploadError(f"Upload failed: object already exists at {path}", cause=e)
            logger.error(f"Error uploading {path} to {self.bucket_name}: {e}")
            raise UploadError(f"Upload failed: {str(e)}", cause=e)
        except BotoCoreError as e:
            logger.error(f"Error uploading {path} to {self.bucket_name}: {e}")
            raise UploadError(f"Upload failed: {str(e)}", cause=e)

        logger.info(f"Uploaded {len(file_data)} bytes to: {self.bucket_name}/{path}")
        return path

    def get_signed_url(self, path: str, ttl: Optional[int] = None) -> str:
        """
        Mint a time-limited read URL.

        Raises:
            InvalidPathError: If path is empty or blank
            StorageError: If URL generation fails
        """
        if _is_blank(path):
            raise InvalidPathError("Invalid storage path provided")

        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': path},
                ExpiresIn=ttl or self.policy.signed_url_ttl
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating signed URL for {path}: {e}")
            raise StorageError(f"Failed to get signed URL: {str(e)}", cause=e)

    def get_signed_urls(self, paths: Iterable[str], ttl: Optional[int] = None) -> Dict[str, str]:
        """
        Batch variant of get_signed_url with partial-success semantics.

        Paths that fail are logged and left out of the result.
        """
        urls = {}
        for path in paths:
            try:
                urls[path] = self.get_signed_url(path, ttl)
            except StorageError as e:
                logger.warning(f"Skipping signed URL for {path!r}: {e.message}")
        return urls

    def download(self, path: str) -> bytes:
        """
        Download object bytes.

        Raises:
            DownloadError: If path is invalid, object is missing or transfer fails
        """
        if _is_blank(path):
            raise DownloadError("Invalid storage path provided", status_code=400)

        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=path)
            file_bytes = response['Body'].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise DownloadError(f"Photo not found: {path}", cause=e, status_code=404)
            logger.error(f"Error downloading {path}: {e}")
            raise DownloadError(f"Failed to download photo: {str(e)}", cause=e)
        except BotoCoreError as e:
            logger.error(f"Error downloading {path}: {e}")
            raise DownloadError(f"Failed to download photo: {str(e)}", cause=e)

        if not file_bytes:
            raise DownloadError("No data returned from photo download")

        logger.debug(f"Downloaded {len(file_bytes)} bytes from: {path}")
        return file_bytes

    def remove(self, path: str) -> None:
        """
        Delete one object. A missing object counts as deleted.

        Raises:
            DeleteError: If the backing call fails
        """
        if _is_blank(path):
            return

        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                logger.info(f"Object already gone: {path}")
                return
            logger.error(f"Error deleting {path}: {e}")
            raise DeleteError(f"Failed to delete photo: {str(e)}", cause=e)
        except BotoCoreError as e:
            logger.error(f"Error deleting {path}: {e}")
            raise DeleteError(f"Failed to delete photo: {str(e)}", cause=e)

        logger.info(f"Deleted object: {self.bucket_name}/{path}")

    def remove_many(self, paths: Iterable[str]) -> int:
        """
        Delete objects in batches of 1000.

        Returns:
            Number of keys submitted for deletion

        Raises:
            DeleteError: If a batch call fails or reports per-key errors
        """
        keys = [p for p in paths if not _is_blank(p)]
        if not keys:
            return 0

        failed: List[str] = []
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={'Objects': [{'Key': key} for key in batch], 'Quiet': True}
                )
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Error in bulk delete of {len(batch)} objects: {e}")
                raise DeleteError(f"Failed to delete photos: {str(e)}", cause=e)

            for error in response.get('Errors', []):
                if error.get('Code') in NOT_FOUND_CODES:
                    continue
                logger.error(f"Failed to delete {error['Key']}: {error.get('Message', 'Unknown error')}")
                failed.append(error['Key'])

        if failed:
            raise DeleteError(f"Failed to delete photos: {', '.join(failed)}")

        logger.info(f"Bulk delete: {len(keys)} objects from {self.bucket_name}")
        return len(keys)

    def list_under_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        """
        List every object under a prefix.

        Returns:
            List of object dicts with key, size, last_modified
        """
        objects = []
        try:
            paginator = self.client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix.rstrip('/') + '/'):
                for obj in page.get('Contents', []):
                    objects.append({
                        'key': obj['Key'],
                        'size': obj.get('Size', 0),
                        'last_modified': obj.get('LastModified'),
                    })
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing objects under {prefix}: {e}")
            raise StorageError(f"Failed to list case files: {str(e)}", cause=e)

        logger.debug(f"Listed {len(objects)} objects with prefix: {prefix}")
        return objects

    def remove_prefix(self, prefix: str) -> int:
        """Delete a whole storage tree. Returns the number of objects removed."""
        keys = [obj['key'] for obj in self.list_under_prefix(prefix)]
        return self.remove_many(keys)

    def check_bucket(self) -> Dict[str, Any]:
        """
        Verify the bucket exists and is reachable.

        Raises:
            StorageError: If bucket access fails
        """
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = _error_code(e)
            if error_code == '403':
                raise StorageError(f"Access denied to bucket: {self.bucket_name}", cause=e)
            elif error_code in ('404', 'NoSuchBucket'):
                raise StorageError(f"Bucket not found: {self.bucket_name}", cause=e)
            logger.error(f"Error checking bucket {self.bucket_name}: {e}")
            raise StorageError(f"Failed to access bucket: {str(e)}", cause=e)
        except BotoCoreError as e:
            logger.error(f"Error checking bucket {self.bucket_name}: {e}")
            raise StorageError(f"Failed to access bucket: {str(e)}", cause=e)

        return {'bucket_name': self.bucket_name, 'accessible': True}
