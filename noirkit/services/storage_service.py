"""
File storage for profile images, project images and CV files.

Files live on disk under `<storage_dir>/<bucket>/<owner>/...` and are served
back by the public /storage route. Uploads overwrite (upsert) and the
resulting public URL is written into the portfolio through the store.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Optional

from noirkit.services.portfolio_store import PortfolioStore
from noirkit.utils.image_utils import standardize_image, validate_image_bytes

logger = logging.getLogger(__name__)

PROFILE_IMAGES = "profile-images"
PROJECT_IMAGES = "project-images"
CV_FILES = "cv-files"
BUCKETS = (PROFILE_IMAGES, PROJECT_IMAGES, CV_FILES)

PDF_MAGIC = b"%PDF-"


class StorageError(Exception):
    """A file could not be stored, read or removed."""


class StorageService:
    def __init__(self, root: Path, public_base_url: str = ""):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _bucket_dir(self, bucket: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        return self.root / bucket

    def object_path(self, bucket: str, name: str) -> Path:
        parts = PurePosixPath(name).parts
        if not parts or name.startswith("/") or any(p in ("..", ".") for p in parts):
            raise StorageError(f"Invalid object name: {name}")
        return self._bucket_dir(bucket).joinpath(*parts)

    def public_url(self, bucket: str, name: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{name}"

    def upload(self, bucket: str, name: str, data: bytes) -> str:
        path = self.object_path(bucket, name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            logger.error("Failed to store %s/%s: %s", bucket, name, exc)
            raise StorageError(f"Failed to store {name}") from exc
        logger.info("Stored %s/%s (%d bytes)", bucket, name, len(data))
        return self.public_url(bucket, name)

    def delete_prefix(self, bucket: str, owner_id: str, stem: str) -> int:
        """Remove `<owner>/<stem>.*`, whatever the extension. Returns the count removed."""
        owner_dir = self.object_path(bucket, owner_id)
        if not owner_dir.is_dir():
            return 0
        removed = 0
        for path in owner_dir.glob(f"{stem}.*"):
            if not path.is_file():
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.error("Failed to delete %s: %s", path, exc)
                raise StorageError(f"Failed to delete {path.name}") from exc
            removed += 1
        return removed

    def resolve(self, bucket: str, name: str) -> Optional[Path]:
        """Path of an existing object, or None."""
        try:
            path = self.object_path(bucket, name)
        except StorageError:
            return None
        return path if path.is_file() else None

    def count(self, bucket: str, owner_id: str) -> int:
        owner_dir = self.object_path(bucket, owner_id)
        if not owner_dir.is_dir():
            return 0
        return sum(1 for p in owner_dir.iterdir() if p.is_file())


def upload_profile_image(storage: StorageService, store: PortfolioStore, filename: str, data: bytes) -> str:
    """Store the owner's profile picture and point personal info at it.

    Raises ValueError on an invalid image.
    """
    owner_id = store.require_owner_id()
    ext = validate_image_bytes(data, filename)

    # An older picture with another extension would otherwise linger
    storage.delete_prefix(PROFILE_IMAGES, owner_id, "profile")
    url = storage.upload(PROFILE_IMAGES, f"{owner_id}/profile{ext}", standardize_image(data, ext))
    store.update_personal_info({"profile_image": url})
    return url


def upload_project_image(
    storage: StorageService,
    store: PortfolioStore,
    project_id: str,
    index: int,
    filename: str,
    data: bytes,
) -> Optional[str]:
    """Store image number `index` of a project and put its URL in the project's images.

    Returns None if the project is not in the store. Raises ValueError on an
    invalid image or index.
    """
    owner_id = store.require_owner_id()
    project = next((p for p in store.projects if p.id == project_id), None)
    if project is None:
        return None
    if index < 0:
        raise ValueError("index must not be negative")

    ext = validate_image_bytes(data, filename)
    url = storage.upload(
        PROJECT_IMAGES,
        f"{owner_id}/{project_id}_{index}{ext}",
        standardize_image(data, ext),
    )

    images = list(project.images)
    if index < len(images):
        images[index] = url
    else:
        images.append(url)
    store.update_project(project_id, {"images": images})
    return url


def upload_cv(storage: StorageService, store: PortfolioStore, filename: str, data: bytes) -> str:
    """Store the owner's CV (PDF only) and point personal info at it."""
    owner_id = store.require_owner_id()
    if PurePosixPath(filename or "").suffix.lower() != ".pdf":
        raise ValueError("CV must be a PDF file.")
    if not data.startswith(PDF_MAGIC):
        raise ValueError("CV file is not a valid PDF.")

    url = storage.upload(CV_FILES, f"{owner_id}/cv.pdf", data)
    store.update_personal_info({"cv_file": url})
    return url


def delete_profile_image(storage: StorageService, store: PortfolioStore) -> bool:
    """Remove the profile picture file and clear the personal info field."""
    owner_id = store.require_owner_id()
    removed = storage.delete_prefix(PROFILE_IMAGES, owner_id, "profile")
    had_image = bool(store.personal_info and store.personal_info.profile_image)
    if had_image:
        store.update_personal_info({"profile_image": ""})
    return bool(removed) or had_image


def delete_cv(storage: StorageService, store: PortfolioStore) -> bool:
    owner_id = store.require_owner_id()
    removed = storage.delete_prefix(CV_FILES, owner_id, "cv")
    had_cv = bool(store.personal_info and store.personal_info.cv_file)
    if had_cv:
        store.update_personal_info({"cv_file": ""})
    return bool(removed) or had_cv


def storage_stats(storage: StorageService, owner_id: str) -> Dict[str, int]:
    return {
        "profile_images": storage.count(PROFILE_IMAGES, owner_id),
        "project_images": storage.count(PROJECT_IMAGES, owner_id),
        "cv_files": storage.count(CV_FILES, owner_id),
    }
