from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from artref.query import DEFAULT_PAGE_SIZE
from artref.service import ArtrefService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/images"
NOT_FOUND_MESSAGE = "No matching image found for the selected criteria."


@dataclass(slots=True)
class ApiResponse:
    status: int
    body: Any


class BadRequest(ValueError):
    pass


def _first(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    if not values:
        return None
    return values[0]


def _int_param(params: dict[str, list[str]], name: str, default: int) -> int:
    raw = _first(params, name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise BadRequest(f"'{name}' must be an integer") from exc


class ImagesApi:
    """Maps GET requests under /api/images onto the service."""

    def __init__(self, service: ArtrefService):
        self.service = service

    def handle(self, target: str) -> ApiResponse:
        parts = urlsplit(target)
        path = parts.path.rstrip("/") or "/"
        params = parse_qs(parts.query, keep_blank_values=True)

        try:
            if path == "/health":
                return ApiResponse(200, {"status": "ok"})

            if path == f"{API_PREFIX}/random":
                image = self.service.random_image(_first(params, "folder"), _first(params, "tags"))
                if image is None:
                    logger.warning("No random image for folder=%s tags=%s", _first(params, "folder"), _first(params, "tags"))
                    return ApiResponse(404, {"message": NOT_FOUND_MESSAGE})
                return ApiResponse(200, image)

            if path == f"{API_PREFIX}/gallery":
                result = self.service.gallery(
                    page=_int_param(params, "page", 1),
                    page_size=_int_param(params, "pageSize", DEFAULT_PAGE_SIZE),
                    folder=_first(params, "folder"),
                    tags=_first(params, "tags"),
                )
                return ApiResponse(200, result)

            if path == f"{API_PREFIX}/folders":
                return ApiResponse(200, self.service.folders(_first(params, "tags")))

            if path == f"{API_PREFIX}/tags":
                return ApiResponse(200, self.service.tags())

            return ApiResponse(404, {"error": "not found"})
        except BadRequest as exc:
            return ApiResponse(400, {"error": str(exc)})
        except Exception:
            logger.exception("Unhandled error for %s", target)
            return ApiResponse(500, {"error": "internal server error"})
