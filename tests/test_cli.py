from pathlib import Path

from typer.testing import CliRunner

from artref.cli import app

runner = CliRunner()


def _invoke(tmp_path: Path, root: Path, *args: str):
    return runner.invoke(app, ["--config", str(tmp_path / "cfg.yaml"), "--root", str(root), *args])


def test_init_config_writes_file(tmp_path: Path) -> None:
    target = tmp_path / "out" / "config.yaml"
    result = runner.invoke(app, ["--config", str(tmp_path / "cfg.yaml"), "init-config", "--path", str(target)])
    assert result.exit_code == 0
    assert target.exists()
    assert (tmp_path / "cfg.yaml").exists()


def test_tags_command(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "tags")
    assert result.exit_code == 0
    assert "face" in result.output
    assert "portrait" in result.output


def test_folders_command(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "folders", "--tags", "face")
    assert result.exit_code == 0
    assert "A" in result.output
    assert "portrait" in result.output


def test_gallery_command(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "gallery", "--page-size", "1", "--page", "2")
    assert result.exit_code == 0
    assert "a2.png" in result.output
    assert "page 2/3" in result.output


def test_random_command_json(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "-q", "random", "--folder", "B", "--json")
    assert result.exit_code == 0
    assert '"fileName": "b1.gif"' in result.output


def test_random_command_exits_nonzero_without_match(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "random", "--tags", "nothing")
    assert result.exit_code == 1
    assert "No matching image" in result.output


def test_rebuild_command_reports_counts(tmp_path: Path, image_root: Path) -> None:
    result = _invoke(tmp_path, image_root, "rebuild")
    assert result.exit_code == 0
    assert "images" in result.output
    assert "3" in result.output


def test_status_command_with_missing_root(tmp_path: Path) -> None:
    result = _invoke(tmp_path, tmp_path / "missing", "status", "--json")
    assert result.exit_code == 0
    assert "does not exist" in result.output


def test_base_path_override(tmp_path: Path, image_root: Path) -> None:
    result = runner.invoke(
        app,
        [
            "--config",
            str(tmp_path / "cfg.yaml"),
            "--root",
            str(image_root),
            "--base-path",
            "/refs",
            "random",
            "--folder",
            "B",
            "--json",
        ],
    )
    assert result.exit_code == 0
    assert "/refs/B/b1.gif" in result.output
