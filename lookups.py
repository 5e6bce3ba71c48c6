"""Read-only database lookups used by the resolver and the dashboard.

Every query failure is re-raised as :class:`StoreError` so callers can tell
"nothing matched" (``None``) apart from "the store could not be asked".
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Optional

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import RECENT_PHOTO_LIMIT
from logger import logger
from models import Attraction, Park, ParkCamera, ParkPathPrefix
from photo_urls import PhotoReference
from resolver import first_success


class StoreError(RuntimeError):
    """The backing store failed while answering a lookup."""


@dataclass(frozen=True, slots=True)
class PrefixMatch:
    park_id: int
    park_name: Optional[str]


@dataclass(frozen=True, slots=True)
class CameraMatch:
    attraction_id: Optional[int]


# The photo code column was renamed from ``source_customer_code`` to
# ``camera_code``; older databases may only have one of them.
PHOTO_CODE_STRATEGIES = (
    ("camera_code", True),
    ("camera_code", False),
    ("source_customer_code", True),
    ("source_customer_code", False),
)


@contextmanager
def _store_call(session: Session, description: str):
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError(f"{description} failed: {exc}") from exc


class SqlLookups:
    """Lookup capabilities backed by a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def find_active_prefix(self, prefix: str) -> Optional[PrefixMatch]:
        with _store_call(self.session, f"prefix lookup {prefix!r}"):
            rows = (
                self.session.query(ParkPathPrefix.park_id, Park.name)
                .join(Park, Park.id == ParkPathPrefix.park_id)
                .filter(
                    ParkPathPrefix.path_prefix == prefix,
                    ParkPathPrefix.is_active.is_(True),
                    Park.is_active.is_(True),
                )
                .limit(2)
                .all()
            )
        if len(rows) > 1:
            logger.warning("Prefix %r maps to several active rows; ignoring", prefix)
            return None
        if not rows:
            return None
        park_id, park_name = rows[0]
        return PrefixMatch(park_id=park_id, park_name=park_name or None)

    def find_active_camera(self, park_id: int, code: str) -> Optional[CameraMatch]:
        with _store_call(self.session, f"camera lookup {park_id}/{code}"):
            row = (
                self.session.query(ParkCamera.attraction_id)
                .filter(
                    ParkCamera.park_id == park_id,
                    ParkCamera.customer_code == code,
                    ParkCamera.is_active.is_(True),
                )
                .first()
            )
        if row is None:
            return None
        return CameraMatch(attraction_id=row.attraction_id)

    def find_attraction_name(self, attraction_id: int) -> Optional[str]:
        with _store_call(self.session, f"attraction lookup {attraction_id}"):
            row = (
                self.session.query(Attraction.name)
                .filter(Attraction.id == attraction_id, Attraction.is_active.is_(True))
                .first()
            )
        if row is None:
            return None
        return row.name or None

    def _recent_photos_by(
        self,
        code_column: str,
        with_park: bool,
        park_id: int,
        camera_code: str,
        limit: int,
        errors: list,
    ) -> Optional[list[PhotoReference]]:
        sql = (
            "SELECT id, captured_at, storage_bucket, storage_path FROM photos "
            f"WHERE {code_column} = :code"
        )
        params = {"code": camera_code, "limit": limit}
        if with_park:
            sql += " AND park_id = :park_id"
            params["park_id"] = park_id
        sql += " ORDER BY captured_at DESC LIMIT :limit"
        stmt = text(sql).columns(
            id=Integer,
            captured_at=DateTime,
            storage_bucket=String,
            storage_path=String,
        )
        try:
            rows = self.session.execute(stmt, params).fetchall()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning(
                "Photo query by %s (with_park=%s) failed: %s", code_column, with_park, exc
            )
            errors.append(exc)
            return None
        return [
            PhotoReference(
                id=row.id,
                bucket=row.storage_bucket,
                path=row.storage_path,
                captured_at=row.captured_at,
            )
            for row in rows
        ]

    def find_recent_camera_photos(
        self, park_id: int, camera_code: str, limit: int = RECENT_PHOTO_LIMIT
    ) -> list[PhotoReference]:
        """Newest photos of one camera, trying each code column layout in turn."""

        errors: list = []
        photos = first_success(
            partial(self._recent_photos_by, column, with_park, park_id, camera_code, limit, errors)
            for column, with_park in PHOTO_CODE_STRATEGIES
        )
        if photos is None:
            last = errors[-1] if errors else None
            raise StoreError(f"photo lookup for camera {camera_code} failed: {last}") from last
        return photos
