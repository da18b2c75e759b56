from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


def mk_image(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"fake-image-bytes-" + path.name.encode("utf-8"))


def mk_metadata(folder: Path, tags: object, name: str | None = None) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / (name or f"{folder.name}-metadata.json")
    target.write_text(json.dumps(tags))
    return target


@pytest.fixture()
def image_root(tmp_path: Path) -> Path:
    """Folder A tagged portrait/face with two images, folder B untagged with one."""
    root = tmp_path / "refs"
    mk_metadata(root / "A", ["portrait", "face"])
    mk_image(root / "A" / "a1.jpg")
    mk_image(root / "A" / "a2.png")
    mk_image(root / "B" / "b1.gif")
    return root
