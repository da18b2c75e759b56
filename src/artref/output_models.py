from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from artref.models import FolderRecord, ImageRecord
from artref.query import Page


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ImageOutput(_CamelModel):
    file_name: str
    relative_path: str
    url: str
    folder_name: str
    tags: list[str] = []

    @classmethod
    def from_record(cls, rec: ImageRecord) -> "ImageOutput":
        return cls(
            file_name=rec.file_name,
            relative_path=rec.rel_path,
            url=rec.url,
            folder_name=rec.folder_name,
            tags=list(rec.tags),
        )


class FolderOutput(_CamelModel):
    name: str
    relative_path: str
    tags: list[str] = []
    image_count: int

    @classmethod
    def from_record(cls, rec: FolderRecord) -> "FolderOutput":
        return cls(name=rec.name, relative_path=rec.rel_path, tags=list(rec.tags), image_count=rec.image_count)


class PageOutput(_CamelModel):
    items: list[ImageOutput] = []
    page_number: int
    page_size: int
    total_count: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PageOutput":
        return cls(
            items=[ImageOutput.from_record(r) for r in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_count=page.total_count,
            total_pages=page.total_pages,
        )


class StatusOutput(BaseModel):
    images: int
    folders: int
    built_at: str | None = None
    expires_in_seconds: float | None = None
    root_path: str | None = None
    base_serve_path: str
    error: str | None = None
    warning: str | None = None
