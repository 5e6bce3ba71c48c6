"""Resolve a decoded storage path to park, camera and attraction.

Stages run strictly in order: path prefix -> park, (park, customer code) ->
camera -> attraction, attraction -> display name. Lookups are injected so the
cascade can run against the database (:class:`lookups.SqlLookups`) or against
in-memory tables in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, Optional, TypeVar

from filename_decoder import DecodedIdentifier
from logger import logger

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ResolvedIdentity:
    matched_park_id: Optional[int] = None
    matched_park_name: Optional[str] = None
    matched_customer_code: Optional[str] = None
    matched_attraction_id: Optional[int] = None
    matched_attraction_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class _CameraHit:
    customer_code: str
    attraction_id: int


def first_success(attempts: Iterable[Callable[[], Optional[T]]]) -> Optional[T]:
    """Call ``attempts`` in order and return the first result that is not ``None``."""

    for attempt in attempts:
        result = attempt()
        if result is not None:
            return result
    return None


def customer_code_candidates(decoded: DecodedIdentifier) -> list[str]:
    """Modern code first, then the legacy one; empty and repeated codes dropped."""

    candidates: list[str] = []
    for code in (decoded.customer_code, decoded.legacy_customer_code):
        if code and code not in candidates:
            candidates.append(code)
    return candidates


def _camera_with_attraction(lookups, park_id, code: str) -> Optional[_CameraHit]:
    camera = lookups.find_active_camera(park_id, code)
    if camera is None:
        logger.debug("No active camera %s in park %s", code, park_id)
        return None
    if camera.attraction_id is None:
        # A camera without an attraction does not count as a match.
        logger.debug("Camera %s in park %s has no attraction", code, park_id)
        return None
    return _CameraHit(customer_code=code, attraction_id=camera.attraction_id)


def resolve(decoded: DecodedIdentifier, lookups) -> ResolvedIdentity:
    """Run the lookup cascade for ``decoded``.

    ``lookups`` must provide ``find_active_prefix``, ``find_active_camera`` and
    ``find_attraction_name``. Store failures raised by them propagate.
    """

    if not decoded.prefix:
        return ResolvedIdentity()

    park = lookups.find_active_prefix(decoded.prefix)
    if park is None:
        logger.debug("No active park for prefix %r", decoded.prefix)
        return ResolvedIdentity()

    hit = first_success(
        partial(_camera_with_attraction, lookups, park.park_id, code)
        for code in customer_code_candidates(decoded)
    )
    if hit is None:
        return ResolvedIdentity(
            matched_park_id=park.park_id,
            matched_park_name=park.park_name,
        )

    attraction_name = lookups.find_attraction_name(hit.attraction_id)
    logger.debug(
        "Resolved %r -> park %s, camera %s, attraction %s",
        decoded.filename,
        park.park_id,
        hit.customer_code,
        hit.attraction_id,
    )
    return ResolvedIdentity(
        matched_park_id=park.park_id,
        matched_park_name=park.park_name,
        matched_customer_code=hit.customer_code,
        matched_attraction_id=hit.attraction_id,
        matched_attraction_name=attraction_name,
    )
