from __future__ import annotations

from io import BytesIO
from pathlib import PurePath
from typing import Dict

from PIL import Image, UnidentifiedImageError


SUPPORTED_EXTS: Dict[str, str] = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".webp": "WEBP",
}

MAX_SIZE = 1600  # px


def image_extension(filename: str) -> str:
    ext = PurePath(filename or "").suffix.lower()
    if ext not in SUPPORTED_EXTS:
        raise ValueError(f"Unsupported file type: {ext or 'none'}. Use PNG/JPG/JPEG/WEBP.")
    return ext


def validate_image_bytes(data: bytes, filename: str) -> str:
    """Check the upload is a readable image of a supported type. Returns its extension."""
    ext = image_extension(filename)
    if not data:
        raise ValueError("Uploaded file is empty.")
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Not a valid image: {exc}") from exc
    return ext


def standardize_image(data: bytes, ext: str) -> bytes:
    """Downscale to MAX_SIZE on the longest side, keeping the original format."""
    fmt = SUPPORTED_EXTS[ext]
    with Image.open(BytesIO(data)) as img:
        if img.width <= MAX_SIZE and img.height <= MAX_SIZE:
            return data

        if fmt == "JPEG":
            img = img.convert("RGB")
        img.thumbnail((MAX_SIZE, MAX_SIZE), Image.LANCZOS)

        out = BytesIO()
        img.save(out, format=fmt, optimize=True)
    return out.getvalue()
