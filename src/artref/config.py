from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from artref.paths import default_config_path

DEFAULT_BASE_SERVE_PATH = "/images"
DEFAULT_TTL_SECONDS = 3600.0


@dataclass(slots=True, frozen=True)
class ImageSettings:
    root_path: Path | None = None
    base_serve_path: str = DEFAULT_BASE_SERVE_PATH


@dataclass(slots=True)
class IndexConfig:
    ttl_seconds: float = DEFAULT_TTL_SECONDS


@dataclass(slots=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 5080
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:4200"])


@dataclass(slots=True)
class AppConfig:
    images: ImageSettings = field(default_factory=ImageSettings)
    index: IndexConfig = field(default_factory=IndexConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _root_path(value: Any) -> Path | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser()


def _to_config(data: dict[str, Any]) -> AppConfig:
    images = data.get("images") or {}
    index = data.get("index") or {}
    server = data.get("server") or {}
    origins = server.get("cors_origins", ["http://localhost:4200"])
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    return AppConfig(
        images=ImageSettings(
            root_path=_root_path(images.get("root_path")),
            base_serve_path=str(images.get("base_serve_path", DEFAULT_BASE_SERVE_PATH) or ""),
        ),
        index=IndexConfig(ttl_seconds=float(index.get("ttl_seconds", DEFAULT_TTL_SECONDS))),
        server=ServerConfig(
            host=str(server.get("host", "127.0.0.1")),
            port=int(server.get("port", 5080)),
            cors_origins=[str(o) for o in origins or []],
        ),
    )


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    return _to_config(base)


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    target.write_text(
        yaml.safe_dump(
            {
                "images": {
                    "root_path": "",
                    "base_serve_path": DEFAULT_BASE_SERVE_PATH,
                },
                "index": {"ttl_seconds": DEFAULT_TTL_SECONDS},
                "server": {
                    "host": "127.0.0.1",
                    "port": 5080,
                    "cors_origins": ["http://localhost:4200"],
                },
            },
            sort_keys=False,
        )
    )
    return target
