"""Turn stored photo references into displayable URLs.

Each bucket is signed in one batch. Paths that receive no signed URL fall back
to a public URL, so private and public buckets work without any visibility
configuration.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from config import MAX_URL_WORKERS, SIGNED_URL_TTL_SECONDS
from logger import logger

# Buckets are signed concurrently on a shared pool.
EXECUTOR = ThreadPoolExecutor(max_workers=max(1, MAX_URL_WORKERS), thread_name_prefix="photo-url")


@dataclass(frozen=True, slots=True)
class PhotoReference:
    id: Any
    bucket: str
    path: str
    captured_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class DisplayUrl:
    id: Any
    url: Optional[str]


def group_paths_by_bucket(refs: Sequence[PhotoReference]) -> dict[str, list[str]]:
    """Distinct paths per bucket, in first-seen order."""

    grouped: dict[str, list[str]] = {}
    for ref in refs:
        paths = grouped.setdefault(ref.bucket, [])
        if ref.path not in paths:
            paths.append(ref.path)
    return grouped


def _bucket_urls(store, bucket: str, paths: list[str]) -> dict[str, str]:
    urls: dict[str, str] = {}
    try:
        signed = store.create_signed_urls(bucket, paths, SIGNED_URL_TTL_SECONDS) or {}
    except Exception:
        logger.warning("Signing failed for bucket %s; using public URLs", bucket, exc_info=True)
        signed = {}

    for path, url in signed.items():
        if url:
            urls[path] = url

    for path in paths:
        if path in urls:
            continue
        try:
            public_url = store.get_public_url(bucket, path)
        except Exception:
            logger.warning("No public URL for %s/%s", bucket, path, exc_info=True)
            continue
        if public_url:
            urls[path] = public_url
    return urls


def materialize(refs: Sequence[PhotoReference], store) -> list[DisplayUrl]:
    """Return one :class:`DisplayUrl` per reference, in input order.

    ``store`` provides ``create_signed_urls(bucket, paths, ttl_seconds)`` and
    ``get_public_url(bucket, path)``; the :mod:`storage` module does.
    """

    grouped = group_paths_by_bucket(refs)
    url_map: dict[tuple[str, str], str] = {}

    futures = {
        bucket: EXECUTOR.submit(_bucket_urls, store, bucket, paths)
        for bucket, paths in grouped.items()
    }
    for bucket, future in futures.items():
        for path, url in future.result().items():
            url_map[(bucket, path)] = url

    return [DisplayUrl(id=ref.id, url=url_map.get((ref.bucket, ref.path))) for ref in refs]
