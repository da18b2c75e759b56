from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from artref.config import ImageSettings
from artref.media.image_io import iter_image_files, iter_subdirectories, join_url, to_rel_path
from artref.metadata import read_folder_tags
from artref.models import FolderRecord, ImageRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ScanResult:
    images: tuple[ImageRecord, ...] = ()
    folders: tuple[FolderRecord, ...] = ()
    error: str | None = None
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _invalid_settings(settings: ImageSettings) -> str | None:
    if settings.root_path is None or not str(settings.root_path).strip():
        return "image root path is not configured"
    if not settings.root_path.is_dir():
        return f"image root path '{settings.root_path}' does not exist or is not a directory"
    if not settings.base_serve_path:
        return "base serve path is not configured"
    return None


def scan_folder(root: Path, folder: Path, base_serve_path: str) -> tuple[list[ImageRecord], FolderRecord | None]:
    name = folder.name
    tags = read_folder_tags(folder)
    images = [
        ImageRecord(
            file_name=entry.file_name,
            rel_path=entry.rel_path,
            url=join_url(base_serve_path, entry.rel_path),
            folder_name=name,
            tags=tuple(tags),
        )
        for entry in iter_image_files(root, folder)
    ]
    if not images:
        logger.debug("No images found in folder %s", name)
        return images, None
    record = FolderRecord(name=name, rel_path=to_rel_path(root, folder), tags=tags, image_count=len(images))
    logger.debug("Folder %s: %d images, %d tags", name, len(images), len(tags))
    return images, record


def scan_root(settings: ImageSettings) -> ScanResult:
    """Scan the immediate subfolders of the configured root.

    Bad configuration gives an empty result with ``warning`` set. An
    ``OSError`` anywhere in the walk gives an empty result with ``error``
    set; nothing scanned before the failure is kept.
    """
    try:
        problem = _invalid_settings(settings)
    except OSError as exc:
        logger.exception("Could not check image root %s", settings.root_path)
        return ScanResult(error=f"{type(exc).__name__}: {exc}")
    if problem is not None:
        logger.warning("Skipping scan: %s", problem)
        return ScanResult(warning=problem)

    root = settings.root_path
    assert root is not None
    all_images: list[ImageRecord] = []
    all_folders: list[FolderRecord] = []
    try:
        folders = list(iter_subdirectories(root))
        logger.info("Found %d image set folders under %s", len(folders), root)
        for folder in folders:
            images, record = scan_folder(root, folder, settings.base_serve_path)
            all_images.extend(images)
            if record is not None:
                all_folders.append(record)
    except OSError as exc:
        logger.exception("Scan of %s failed", root)
        return ScanResult(error=f"{type(exc).__name__}: {exc}")

    warning = None
    if not all_folders:
        warning = f"no image folders found under '{root}'"
        logger.warning("No image folders found under %s", root)
    return ScanResult(images=tuple(all_images), folders=tuple(all_folders), warning=warning)
