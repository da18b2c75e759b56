from __future__ import annotations

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
import mimetypes
import os
from pathlib import Path
import shutil
from typing import Any
from urllib.parse import unquote, urlsplit

from artref.api.protocol import ImagesApi
from artref.config import ImageSettings
from artref.media.image_io import is_image_file
from artref.service import ArtrefService

logger = logging.getLogger(__name__)


class StaticFiles:
    """Serves image files under ``root`` at the URL prefix ``mount``."""

    def __init__(self, root: Path, mount: str):
        self.root = root.resolve()
        self.mount = "/" + mount.strip("/")

    def resolve(self, target: str) -> Path | None:
        path = unquote(urlsplit(target).path)
        prefix = self.mount.rstrip("/") + "/"
        if not path.startswith(prefix):
            return None
        rel = path[len(prefix) :]
        if not rel:
            return None
        candidate = (self.root / rel).resolve()
        if not candidate.is_relative_to(self.root):
            return None
        if not candidate.is_file() or not is_image_file(candidate.name):
            return None
        return candidate


def static_files_for(settings: ImageSettings) -> StaticFiles | None:
    root = settings.root_path
    try:
        usable = root is not None and root.is_dir() and bool(settings.base_serve_path)
    except OSError as exc:
        logger.warning("Could not check image root %s: %s", root, exc)
        usable = False
    if not usable:
        logger.warning(
            "Image root is not configured correctly, does not exist, or base serve path is missing; "
            "static images will not be served. root_path=%r base_serve_path=%r",
            str(root) if root else None,
            settings.base_serve_path,
        )
        return None
    logger.info("Serving static files from %s at %s", root, settings.base_serve_path)
    return StaticFiles(root, settings.base_serve_path)


class ArtrefHTTPServer(ThreadingHTTPServer):
    def __init__(self, address: tuple[str, int], service: ArtrefService):
        self.api = ImagesApi(service)
        self.static = static_files_for(service.config.images)
        self.cors_origins = list(service.config.server.cors_origins)
        super().__init__(address, _Handler)


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    server_version = "artref"

    @property
    def _srv(self) -> ArtrefHTTPServer:
        return self.server  # type: ignore[return-value]

    def do_GET(self) -> None:  # noqa: N802
        static = self._srv.static
        if static is not None:
            file_path = static.resolve(self.path)
            if file_path is not None:
                self._write_file(file_path)
                return
        response = self._srv.api.handle(self.path)
        self._write_json(response.status, response.body)

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.send_response(204)
        self._send_cors_headers()
        self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
        requested = self.headers.get("Access-Control-Request-Headers")
        if requested:
            self.send_header("Access-Control-Allow-Headers", requested)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, fmt: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), fmt % args)

    def _send_cors_headers(self) -> None:
        origins = self._srv.cors_origins
        origin = self.headers.get("Origin")
        if "*" in origins:
            self.send_header("Access-Control-Allow-Origin", "*")
        elif origin and origin in origins:
            self.send_header("Access-Control-Allow-Origin", origin)
            self.send_header("Vary", "Origin")

    def _write_json(self, status: int, payload: Any) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self._send_cors_headers()
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _write_file(self, path: Path) -> None:
        ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            f = path.open("rb")
        except OSError:
            self._write_json(404, {"error": "not found"})
            return
        with f:
            size = os.fstat(f.fileno()).st_size
            self.send_response(200)
            self._send_cors_headers()
            self.send_header("Content-Type", ctype)
            self.send_header("Content-Length", str(size))
            self.end_headers()
            shutil.copyfileobj(f, self.wfile)


def build_server(service: ArtrefService, host: str = "127.0.0.1", port: int = 5080) -> ArtrefHTTPServer:
    return ArtrefHTTPServer((host, port), service)


def run_http_server(service: ArtrefService, host: str = "127.0.0.1", port: int = 5080) -> int:
    service.rebuild()
    server = build_server(service, host=host, port=port)
    logger.info("Listening on http://%s:%d", host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0
