# main.py

import os

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

import storage
from config import RECENT_PHOTO_LIMIT
from db import get_db
from logger import logger
from lookups import SqlLookups, StoreError
from photo_urls import materialize
from preview import preview

app = FastAPI(default_response_class=ORJSONResponse)

# Allowed dashboard origins, comma separated. Defaults to any origin.
cors_env = os.environ.get("CORS_ORIGINS", "*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in cors_env.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/admin/preview-parse")
def preview_parse(path: str = Query(default=""), db: Session = Depends(get_db)):
    """Show how a storage path decodes and which park/camera/attraction it hits."""

    if not path.strip():
        raise HTTPException(status_code=400, detail="Missing ?path=")

    try:
        result = preview(path, SqlLookups(db))
    except StoreError as exc:
        logger.warning("Preview lookup failed for %r: %s", path, exc)
        raise HTTPException(status_code=503, detail="Lookup store unavailable")

    return {"ok": True, "data": result.to_dict()}


@app.get("/parks/{park_id}/cameras/{camera_code}/photos")
def camera_photos(
    park_id: int,
    camera_code: str,
    limit: int = Query(default=RECENT_PHOTO_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Return the newest photos of a camera with displayable image URLs."""

    try:
        photos = SqlLookups(db).find_recent_camera_photos(park_id, camera_code, limit)
    except StoreError as exc:
        logger.warning("Photo lookup failed for camera %s: %s", camera_code, exc)
        raise HTTPException(status_code=503, detail="Lookup store unavailable")

    urls = materialize(photos, storage)
    return [
        {
            "id": photo.id,
            "captured_at": photo.captured_at.isoformat() if photo.captured_at else None,
            "storage_bucket": photo.bucket,
            "storage_path": photo.path,
            "image_url": display.url,
        }
        for photo, display in zip(photos, urls)
    ]
