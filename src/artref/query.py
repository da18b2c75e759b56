from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
import random
from typing import Iterable, Sequence

from artref.index_store import IndexStore
from artref.models import FolderRecord, ImageRecord

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_RANDOM = random.Random()


@dataclass(slots=True)
class Page:
    items: list[ImageRecord] = field(default_factory=list)
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)


def total_pages(total_count: int, page_size: int) -> int:
    if page_size == 0:
        return 0
    return math.ceil(total_count / page_size)


def clamp_page(page: int) -> int:
    return max(1, page)


def clamp_page_size(page_size: int) -> int:
    return min(max(1, page_size), MAX_PAGE_SIZE)


def parse_tag_list(raw: str | Iterable[str] | None) -> list[str]:
    """Normalize a comma-separated string or a list of tags.

    Entries are split on commas and trimmed; empty entries are dropped.
    An empty result means no tag filter.
    """
    if raw is None:
        return []
    parts = [raw] if isinstance(raw, str) else list(raw)
    out: list[str] = []
    for part in parts:
        for tag in str(part).split(","):
            tag = tag.strip()
            if tag:
                out.append(tag)
    return out


def _tag_key_set(tags: Iterable[str] | None) -> set[str]:
    return {t.lower() for t in parse_tag_list(tags)}


def _has_any_tag(item_tags: Sequence[str], wanted: set[str]) -> bool:
    return any(t.lower() in wanted for t in item_tags)


def filter_images(
    images: Iterable[ImageRecord],
    folder_name: str | None = None,
    tags: Iterable[str] | None = None,
) -> list[ImageRecord]:
    out = list(images)
    if folder_name:
        key = folder_name.lower()
        out = [img for img in out if img.folder_name.lower() == key]
    wanted = _tag_key_set(tags)
    if wanted:
        out = [img for img in out if _has_any_tag(img.tags, wanted)]
    return out


def unique_tags(folders: Iterable[FolderRecord]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for folder in folders:
        for tag in folder.tags:
            key = tag.lower()
            if key in seen:
                continue
            seen.add(key)
            out.append(tag)
    return sorted(out, key=lambda t: (t.lower(), t))


class QueryEngine:
    """Read-only queries over one snapshot per call.

    Never touches the filesystem itself; an expired or missing snapshot
    is rebuilt by the store before the query runs.
    """

    def __init__(self, store: IndexStore, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or _RANDOM

    def get_random_image(
        self,
        folder_name: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> ImageRecord | None:
        snap = self.store.current_snapshot()
        eligible = filter_images(snap.images, folder_name, tags)
        if not eligible:
            logger.warning(
                "No eligible images for random pick. folder=%s tags=%s",
                folder_name,
                ",".join(parse_tag_list(tags)),
            )
            return None
        picked = eligible[self.rng.randrange(len(eligible))]
        logger.debug("Random pick %s from folder %s", picked.file_name, picked.folder_name)
        return picked

    def get_images(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        folder_name: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Page:
        page = clamp_page(page)
        page_size = clamp_page_size(page_size)
        snap = self.store.current_snapshot()
        matched = filter_images(snap.images, folder_name, tags)
        start = (page - 1) * page_size
        items = matched[start : start + page_size]
        logger.debug(
            "Gallery page=%d size=%d folder=%s tags=%s: %d of %d",
            page,
            page_size,
            folder_name,
            ",".join(parse_tag_list(tags)),
            len(items),
            len(matched),
        )
        return Page(items=items, page_number=page, page_size=page_size, total_count=len(matched))

    def get_folders(self, tags: Iterable[str] | None = None) -> list[FolderRecord]:
        folders = list(self.store.current_snapshot().folders)
        wanted = _tag_key_set(tags)
        if wanted:
            folders = [f for f in folders if _has_any_tag(f.tags, wanted)]
        logger.debug("Folders tags=%s: %d", ",".join(parse_tag_list(tags)), len(folders))
        return folders

    def get_all_unique_tags(self) -> list[str]:
        tags = unique_tags(self.store.current_snapshot().folders)
        logger.debug("Found %d unique tags", len(tags))
        return tags
