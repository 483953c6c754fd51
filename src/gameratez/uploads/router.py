"""Image upload endpoint. Files are served back from ``/uploads``."""

from __future__ import annotations

import asyncio
import secrets
from pathlib import Path, PurePath

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from gameratez.config import Settings
from gameratez.dependencies import get_app_settings
from gameratez.errors import ValidationError
from gameratez.uploads.schemas import UploadResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Uploads"])


def stored_name(original: str | None) -> str:
    """Random file name, keeping a short alphanumeric extension from the upload."""
    suffix = PurePath(original or "").suffix.lower()
    if not (2 <= len(suffix) <= 6 and suffix[1:].isalnum()):
        suffix = ""
    return f"{secrets.token_hex(16)}{suffix}"


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@router.post("/upload-image", response_model=UploadResponse, status_code=201)
async def upload_image(
    image: UploadFile | None = File(None),
    settings: Settings = Depends(get_app_settings),
) -> UploadResponse:
    """Store one image (max 5 MB) and return its public URL."""
    if image is None:
        raise ValidationError("No file uploaded")
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("Only image uploads are allowed")

    data = await image.read(settings.upload_max_bytes + 1)
    if len(data) > settings.upload_max_bytes:
        raise HTTPException(status_code=413, detail="File too large")
    if not data:
        raise ValidationError("No file uploaded")

    name = stored_name(image.filename)
    await asyncio.to_thread(_write, Path(settings.uploads_dir) / name, data)
    logger.info("image_uploaded", name=name, size=len(data), content_type=image.content_type)
    return UploadResponse(url=f"/uploads/{name}")
