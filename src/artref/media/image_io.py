from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Iterator

SUPPORTED_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
}


@dataclass(slots=True)
class FileEntry:
    abs_path: Path
    file_name: str
    rel_path: str


def is_image_file(name: str) -> bool:
    return Path(name).suffix.lower() in SUPPORTED_EXTENSIONS


def to_rel_path(root: Path, path: Path) -> str:
    return str(path.relative_to(root)).replace("\\", "/")


def join_url(base_serve_path: str, rel_path: str) -> str:
    base = base_serve_path.replace("\\", "/").rstrip("/")
    rel = rel_path.replace("\\", "/").lstrip("/")
    if not base_serve_path:
        return rel
    return f"{base}/{rel}"


def iter_subdirectories(root: Path) -> Iterator[Path]:
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir():
            yield Path(entry.path)


def iter_image_files(root: Path, folder: Path) -> Iterator[FileEntry]:
    """Yield image files directly inside ``folder``, sorted by name."""
    with os.scandir(folder) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if not entry.is_file():
            continue
        if not is_image_file(entry.name):
            continue
        p = Path(entry.path)
        yield FileEntry(abs_path=p, file_name=entry.name, rel_path=to_rel_path(root, p))
