import os
import secrets
from datetime import datetime
from typing import List

from fastapi import HTTPException, UploadFile

from sproutify.core.config import settings
from sproutify.core.logger import app_logger


def build_scouting_path(tower_id: int, filename: str, now: datetime = None) -> str:
    """``scouting/<towerId>/<timestamp>-<rand>.<ext>``"""
    now = now or datetime.now()
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    timestamp = int(now.timestamp() * 1000)
    return f"scouting/{tower_id}/{timestamp}-{secrets.token_hex(6)}.{ext}"


def public_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/static/{path.lstrip('/')}"


async def save_scouting_image(tower_id: int, upload: UploadFile, base_url: str) -> str:
    if not (upload.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail=f"{upload.filename} is not an image")

    path = build_scouting_path(tower_id, upload.filename or "")
    file_path = os.path.join(settings.STATIC_DIR, path)
    os.makedirs(os.path.dirname(file_path), exist_ok=True)

    content = await upload.read()
    with open(file_path, "wb") as f:
        f.write(content)

    app_logger.info(f"Saved scouting image {path} ({len(content)} bytes)")
    return public_url(base_url, path)


async def save_scouting_images(tower_id: int, uploads: List[UploadFile], base_url: str) -> List[str]:
    if len(uploads) > settings.MAX_SCOUTING_IMAGES:
        raise HTTPException(
            status_code=400,
            detail=f"At most {settings.MAX_SCOUTING_IMAGES} images per observation"
        )

    saved = []
    try:
        for upload in uploads:
            saved.append(await save_scouting_image(tower_id, upload, base_url))
    except Exception:
        # drop the files already written for this request
        for url in saved:
            relative = url.split("/static/", 1)[-1]
            file_path = os.path.join(settings.STATIC_DIR, relative)
            if os.path.exists(file_path):
                os.remove(file_path)
        raise

    return saved
