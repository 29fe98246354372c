from __future__ import annotations

import logging
import mimetypes
import time
import uuid
from pathlib import Path

from app.core.config import settings
from app.core.errors import InvalidUpload, StoreWriteError
from app.core.identity import Identity, require_identity

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif")

URL_PREFIX = "/uploads"


def uploads_root() -> Path:
    return Path(settings.uploads_dir).resolve()


def _image_ext(filename: str, content_type: str | None = None) -> str:
    name = (filename or "").lower()
    for ext in IMAGE_EXTENSIONS:
        if name.endswith(ext):
            return ext
    if content_type and content_type.startswith("image/"):
        guessed = mimetypes.guess_extension(content_type)
        if guessed in IMAGE_EXTENSIONS:
            return guessed
    raise InvalidUpload("Only png, jpg, webp and gif images are accepted")


def save_room_image(
    *,
    identity: Identity | None,
    filename: str,
    content: bytes,
    content_type: str | None = None,
) -> str:
    """Store a listing image under rooms/<user_id>/ and return its public URL."""
    owner = require_identity(identity)
    if not content:
        raise InvalidUpload("Empty file")
    if len(content) > settings.max_upload_bytes:
        raise InvalidUpload(f"Image larger than {settings.max_upload_bytes} bytes")

    ext = _image_ext(filename, content_type)
    rel = Path("rooms") / owner.user_id / f"{int(time.time() * 1000)}_{uuid.uuid4().hex}{ext}"
    dest = uploads_root() / rel
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(content)
    except OSError as exc:
        logger.exception("Image upload failed: %s", dest)
        raise StoreWriteError("Failed to store image") from exc

    logger.info("Image stored: user=%s path=%s size=%s", owner.user_id, rel.as_posix(), len(content))
    return f"{URL_PREFIX}/{rel.as_posix()}"
