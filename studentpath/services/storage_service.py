"""
Object storage for uploads (resumes, avatars, logos, syllabi, placement sheets).

Any S3-compatible bucket works; set S3_ENDPOINT_URL for non-AWS providers
and S3_PUBLIC_BASE_URL when objects are served from a CDN.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from studentpath.core.config import get_settings
from studentpath.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

settings = get_settings()

_s3_client = None


def get_s3_client():
    """Get or create the S3 client (singleton pattern)."""
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id or None,
            aws_secret_access_key=settings.aws_secret_access_key or None,
        )
    return _s3_client


def public_url(key: str) -> str:
    if settings.s3_public_base_url:
        return f"{settings.s3_public_base_url.rstrip('/')}/{key}"
    if settings.s3_endpoint_url:
        return f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket}/{key}"
    return f"https://{settings.s3_bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"


def key_from_url(url: str) -> Optional[str]:
    """Inverse of public_url for URLs that point into our bucket."""
    for prefix in filter(None, [
        settings.s3_public_base_url,
        settings.s3_endpoint_url and f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket}",
        f"https://{settings.s3_bucket}.s3.{settings.aws_region}.amazonaws.com",
    ]):
        prefix = prefix.rstrip("/") + "/"
        if url.startswith(prefix):
            return url[len(prefix):]
    return None


def upload_file(content: bytes, folder: str, key: str, content_type: str = "application/octet-stream") -> str:
    """
    Store bytes under `folder/key` (overwriting) and return the public URL.

    Raises:
        ExternalServiceError: the bucket rejected the upload
    """
    object_key = f"{folder}/{key}"
    try:
        get_s3_client().put_object(
            Bucket=settings.s3_bucket,
            Key=object_key,
            Body=content,
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Upload to {object_key} failed: {e}")
        raise ExternalServiceError("storage", "Failed to upload file")

    logger.info(f"Uploaded {len(content)} bytes to {object_key}")
    return public_url(object_key)


def download_file(url: str) -> bytes:
    """
    Fetch a previously uploaded object back by its public URL.

    Raises:
        ExternalServiceError: URL is not in our bucket or the download failed
    """
    object_key = key_from_url(url)
    if not object_key:
        raise ExternalServiceError("storage", f"Not a storage URL: {urlparse(url).netloc}")

    try:
        response = get_s3_client().get_object(Bucket=settings.s3_bucket, Key=object_key)
        return response["Body"].read()
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Download of {object_key} failed: {e}")
        raise ExternalServiceError("storage", "Failed to download file")
