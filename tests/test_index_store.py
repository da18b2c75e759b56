from pathlib import Path
import threading

from conftest import mk_image

from artref.config import ImageSettings
from artref.index_store import IndexStore
from artref.scanner import ScanResult, scan_root


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _store(root: Path, clock: FakeClock, scanner=scan_root) -> IndexStore:
    return IndexStore(ImageSettings(root_path=root), ttl_seconds=3600, scanner=scanner, clock=clock)


def test_first_read_builds_snapshot(image_root: Path) -> None:
    store = _store(image_root, FakeClock())
    assert store.snapshot is None
    snap = store.current_snapshot()
    assert len(snap.images) == 3
    assert len(snap.folders) == 2
    assert store.rebuild_count == 1


def test_snapshot_is_reused_until_expiry(image_root: Path) -> None:
    clock = FakeClock()
    store = _store(image_root, clock)
    first = store.current_snapshot()
    assert first.expires_at == clock.now + 3600

    clock.now += 3599
    assert store.current_snapshot() is first
    assert store.rebuild_count == 1

    mk_image(image_root / "C" / "c1.webp")
    clock.now += 1
    second = store.current_snapshot()
    assert second is not first
    assert store.rebuild_count == 2
    assert len(second.images) == 4


def test_rebuild_is_idempotent(image_root: Path) -> None:
    store = _store(image_root, FakeClock())
    a = store.rebuild()
    b = store.rebuild()
    assert a is not b
    assert a.images == b.images
    assert a.folders == b.folders


def test_failed_rebuild_clears_previous_snapshot(image_root: Path) -> None:
    outcomes = [scan_root, lambda settings: ScanResult(error="OSError: disk gone")]

    def _scanner(settings: ImageSettings) -> ScanResult:
        return outcomes.pop(0)(settings)

    store = _store(image_root, FakeClock(), scanner=_scanner)
    assert len(store.rebuild().images) == 3

    failed = store.rebuild()
    assert failed.images == () and failed.folders == ()
    assert failed.error == "OSError: disk gone"
    assert store.current_snapshot() is failed


def test_concurrent_readers_share_one_rebuild(image_root: Path) -> None:
    calls: list[int] = []
    gate = threading.Event()

    def _slow_scanner(settings: ImageSettings) -> ScanResult:
        calls.append(1)
        gate.wait(timeout=5)
        return scan_root(settings)

    store = _store(image_root, FakeClock(), scanner=_slow_scanner)
    seen: list[int] = []

    def _reader() -> None:
        seen.append(len(store.current_snapshot().images))

    threads = [threading.Thread(target=_reader) for _ in range(8)]
    for t in threads:
        t.start()
    gate.set()
    for t in threads:
        t.join(timeout=5)

    assert len(calls) == 1
    assert seen == [3] * 8


def test_readers_see_old_snapshot_during_rebuild(image_root: Path) -> None:
    started = threading.Event()
    release = threading.Event()
    slow = {"on": False}

    def _scanner(settings: ImageSettings) -> ScanResult:
        if slow["on"]:
            started.set()
            release.wait(timeout=5)
        return scan_root(settings)

    store = _store(image_root, FakeClock(), scanner=_scanner)
    old = store.rebuild()

    slow["on"] = True
    mk_image(image_root / "C" / "c1.png")
    worker = threading.Thread(target=store.rebuild)
    worker.start()
    assert started.wait(timeout=5)

    assert store.current_snapshot() is old
    release.set()
    worker.join(timeout=5)

    assert len(store.current_snapshot().images) == 4


def test_root_check_failure_degrades_to_empty(image_root: Path, monkeypatch) -> None:
    real_is_dir = Path.is_dir

    def _is_dir(self: Path) -> bool:
        if self == image_root:
            raise PermissionError("denied")
        return real_is_dir(self)

    monkeypatch.setattr(Path, "is_dir", _is_dir)
    snap = _store(image_root, FakeClock()).current_snapshot()
    assert snap.images == () and snap.folders == ()
    assert "denied" in (snap.error or "")
