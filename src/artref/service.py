from __future__ import annotations

import random
import time
from typing import Any, Callable, Iterable, Union

from artref.config import AppConfig
from artref.index_store import IndexStore
from artref.output_models import FolderOutput, ImageOutput, PageOutput, StatusOutput
from artref.query import DEFAULT_PAGE_SIZE, QueryEngine, parse_tag_list
from artref.scanner import ScanResult, scan_root

TagsArg = Union[str, Iterable[str], None]


class ArtrefService:
    def __init__(
        self,
        config: AppConfig,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        scanner: Callable[..., ScanResult] = scan_root,
    ):
        self.config = config
        self._clock = clock
        self.store = IndexStore(
            config.images,
            ttl_seconds=config.index.ttl_seconds,
            scanner=scanner,
            clock=clock,
        )
        self.engine = QueryEngine(self.store, rng=rng)

    def rebuild(self) -> dict[str, Any]:
        started = time.perf_counter()
        snap = self.store.rebuild()
        return {
            "images": len(snap.images),
            "folders": len(snap.folders),
            "seconds": round(time.perf_counter() - started, 3),
            "error": snap.error,
            "warning": snap.warning,
        }

    def random_image(self, folder: str | None = None, tags: TagsArg = None) -> dict[str, Any] | None:
        rec = self.engine.get_random_image(folder, parse_tag_list(tags))
        if rec is None:
            return None
        return ImageOutput.from_record(rec).to_json_dict()

    def gallery(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        folder: str | None = None,
        tags: TagsArg = None,
    ) -> dict[str, Any]:
        result = self.engine.get_images(page, page_size, folder, parse_tag_list(tags))
        return PageOutput.from_page(result).to_json_dict()

    def folders(self, tags: TagsArg = None) -> list[dict[str, Any]]:
        return [FolderOutput.from_record(f).to_json_dict() for f in self.engine.get_folders(parse_tag_list(tags))]

    def tags(self) -> list[str]:
        return self.engine.get_all_unique_tags()

    def status(self) -> dict[str, Any]:
        snap = self.store.snapshot
        images = self.config.images
        out = StatusOutput(
            images=len(snap.images) if snap else 0,
            folders=len(snap.folders) if snap else 0,
            built_at=snap.built_at if snap else None,
            expires_in_seconds=round(max(0.0, snap.expires_at - self._clock()), 1) if snap else None,
            root_path=str(images.root_path) if images.root_path else None,
            base_serve_path=images.base_serve_path,
            error=snap.error if snap else None,
            warning=snap.warning if snap else None,
        )
        return out.model_dump()
