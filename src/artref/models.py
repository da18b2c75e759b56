from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ImageRecord:
    file_name: str
    rel_path: str
    url: str
    folder_name: str
    tags: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class FolderRecord:
    name: str
    rel_path: str
    tags: tuple[str, ...] = ()
    image_count: int = 0


@dataclass(slots=True, frozen=True)
class Snapshot:
    """One complete scan pass, published as a unit.

    ``expires_at`` is on the store's clock (monotonic by default);
    ``built_at`` is wall-clock ISO time for display only.
    """

    images: tuple[ImageRecord, ...]
    folders: tuple[FolderRecord, ...]
    built_at: str
    expires_at: float
    error: str | None = None
    warning: str | None = None

    def expired(self, now: float) -> bool:
        return now >= self.expires_at
