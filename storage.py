from typing import Iterable, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import S3_ENDPOINT, S3_KEY, S3_PUBLIC_BASE_URL, S3_REGION, S3_SECRET
from logger import logger

S3 = boto3.client(
    "s3",
    endpoint_url=S3_ENDPOINT,  # set for MinIO
    aws_access_key_id=S3_KEY,
    aws_secret_access_key=S3_SECRET,
    region_name=S3_REGION,
)


def create_signed_urls(bucket: str, paths: Iterable[str], ttl_seconds: int) -> dict[str, Optional[str]]:
    """Presign GET URLs for ``paths``; a path that cannot be signed maps to None.

    Presigning is local and does not check that the object exists, so a
    missing key still gets a signed URL that answers 404 when fetched.
    """

    urls: dict[str, Optional[str]] = {}
    for path in paths:
        try:
            urls[path] = S3.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Could not sign %s/%s: %s", bucket, path, exc)
            urls[path] = None
    return urls


def get_public_url(bucket: str, path: str) -> Optional[str]:
    if not bucket or not path:
        return None
    key = quote(path.lstrip("/"))
    if S3_PUBLIC_BASE_URL:
        return f"{S3_PUBLIC_BASE_URL.rstrip('/')}/{bucket}/{key}"
    if S3_ENDPOINT:
        return f"{S3_ENDPOINT.rstrip('/')}/{bucket}/{key}"
    return f"https://{bucket}.s3.amazonaws.com/{key}"
