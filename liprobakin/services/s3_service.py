"""
S3 service for storing uploaded files.

Provides a lazy-initialized boto3 client and helpers for verification ID
images and team/player media.
"""

import logging
import os
import time
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Lazy-initialized S3 client
_s3_client = None


def _get_config():
    """Read S3 configuration from environment at call time (not import time)."""
    return {
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        "bucket": os.getenv("AWS_S3_BUCKET"),
        "region": os.getenv("AWS_S3_REGION", "eu-west-3"),
    }


def _get_s3_client():
    """Get or create the boto3 S3 client. Lazy-imports boto3 to avoid import-time dependency."""
    global _s3_client
    if _s3_client is None:
        cfg = _get_config()
        if not all([cfg["access_key_id"], cfg["secret_access_key"], cfg["bucket"]]):
            raise ValueError(
                "AWS S3 environment variables not configured. "
                "Set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, and AWS_S3_BUCKET."
            )
        import boto3

        _s3_client = boto3.client(
            "s3",
            aws_access_key_id=cfg["access_key_id"],
            aws_secret_access_key=cfg["secret_access_key"],
            region_name=cfg["region"],
        )
    return _s3_client


def _public_url(bucket: str, region: str, key: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def upload_verification_image(user_id: int, image_bytes: bytes, content_type: str, extension: str) -> str:
    """
    Upload a verification ID image.

    Stores at key: verification/{user_id}/{timestamp}.{extension}

    Returns:
        URL of the uploaded image
    """
    client = _get_s3_client()
    cfg = _get_config()
    key = f"verification/{user_id}/{int(time.time())}.{extension}"

    client.put_object(
        Bucket=cfg["bucket"],
        Key=key,
        Body=image_bytes,
        ContentType=content_type,
    )

    logger.info(f"Uploaded verification image for user {user_id}: {key}")
    return _public_url(cfg["bucket"], cfg["region"], key)


def delete_file_by_url(url: str) -> bool:
    """
    Delete a stored file by its URL. Best-effort: logs errors but doesn't raise.

    Returns:
        True if deleted successfully, False otherwise
    """
    try:
        client = _get_s3_client()
        cfg = _get_config()
        key = _extract_key_from_url(url, cfg["bucket"])
        if not key:
            logger.warning(f"Could not extract S3 key from URL: {url}")
            return False

        client.delete_object(Bucket=cfg["bucket"], Key=key)
        logger.info(f"Deleted file from S3: {key}")
        return True
    except Exception as e:
        logger.error(f"Failed to delete file from S3: {e}")
        return False


def _extract_key_from_url(url: str, expected_bucket: Optional[str] = None) -> Optional[str]:
    """
    Extract the S3 object key from a full S3 URL.

    Args:
        url: Full S3 URL
        expected_bucket: Expected bucket name; the hostname must contain it

    Returns:
        Object key string or None if parsing fails or hostname doesn't match
    """
    try:
        parsed = urlparse(url)

        if expected_bucket and parsed.hostname and expected_bucket not in parsed.hostname:
            logger.warning(
                f"URL hostname '{parsed.hostname}' does not match expected bucket '{expected_bucket}'"
            )
            return None

        key = parsed.path.lstrip("/")
        return key if key else None
    except Exception:
        return None
