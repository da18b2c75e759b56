from pathlib import Path

from conftest import mk_metadata

from artref.metadata import find_metadata_file, read_folder_tags


def test_reads_tags_in_file_order(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder, ["portrait", "face", "Portrait"])
    assert read_folder_tags(folder) == ("portrait", "face", "Portrait")


def test_missing_file_gives_no_tags(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    folder.mkdir()
    (folder / "notes.json").write_text('["ignored"]')
    assert find_metadata_file(folder) is None
    assert read_folder_tags(folder) == ()


def test_malformed_json_gives_no_tags(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    folder.mkdir()
    (folder / "A-metadata.json").write_text("[not json")
    assert read_folder_tags(folder) == ()


def test_wrong_shape_gives_no_tags(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder, {"tags": ["portrait"]})
    assert read_folder_tags(folder) == ()

    mk_metadata(folder, ["portrait", 3])
    assert read_folder_tags(folder) == ()


def test_null_document_gives_no_tags(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder, None)
    assert read_folder_tags(folder) == ()


def test_first_metadata_file_by_name_wins(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder, ["second"], name="zz-metadata.json")
    mk_metadata(folder, ["first"], name="aa-metadata.json")
    assert find_metadata_file(folder) == folder / "aa-metadata.json"
    assert read_folder_tags(folder) == ("first",)


def test_metadata_search_is_not_recursive(tmp_path: Path) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder / "nested", ["deep"])
    assert read_folder_tags(folder) == ()


def test_unreadable_file_is_absorbed(tmp_path: Path, monkeypatch) -> None:
    folder = tmp_path / "A"
    mk_metadata(folder, ["portrait"])

    def _boom(self, *args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_text", _boom)
    assert read_folder_tags(folder) == ()
