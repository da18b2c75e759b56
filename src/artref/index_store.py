from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from artref.config import DEFAULT_TTL_SECONDS, ImageSettings
from artref.models import Snapshot
from artref.scanner import ScanResult, scan_root
from artref.util.time import now_iso

logger = logging.getLogger(__name__)

Scanner = Callable[[ImageSettings], ScanResult]
Clock = Callable[[], float]


class IndexStore:
    """Owns the current snapshot and its expiry.

    Readers take the published reference without locking. Rebuilds are
    serialized by a lock and publish a fully built snapshot by swapping
    a single attribute, so a reader sees either the old or the new one.
    """

    def __init__(
        self,
        settings: ImageSettings,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        scanner: Scanner = scan_root,
        clock: Clock = time.monotonic,
    ):
        self.settings = settings
        self.ttl_seconds = ttl_seconds
        self._scanner = scanner
        self._clock = clock
        self._snapshot: Snapshot | None = None
        self._rebuild_lock = threading.Lock()
        self.rebuild_count = 0

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    def _rebuild_locked(self) -> Snapshot:
        started = self._clock()
        logger.info("Rebuilding image index from %s", self.settings.root_path)
        result = self._scanner(self.settings)
        if not result.ok:
            logger.error("Image index rebuild failed, serving an empty index: %s", result.error)
        finished = self._clock()
        snap = Snapshot(
            images=result.images if result.ok else (),
            folders=result.folders if result.ok else (),
            built_at=now_iso(),
            expires_at=finished + self.ttl_seconds,
            error=result.error,
            warning=result.warning,
        )
        self._snapshot = snap
        self.rebuild_count += 1
        logger.info(
            "Indexed %d images from %d folders in %.3fs",
            len(snap.images),
            len(snap.folders),
            finished - started,
        )
        return snap

    def rebuild(self) -> Snapshot:
        with self._rebuild_lock:
            return self._rebuild_locked()

    def current_snapshot(self) -> Snapshot:
        snap = self._snapshot
        if snap is not None and not snap.expired(self._clock()):
            return snap
        with self._rebuild_lock:
            # Another thread may have rebuilt while we waited.
            snap = self._snapshot
            if snap is not None and not snap.expired(self._clock()):
                return snap
            return self._rebuild_locked()
