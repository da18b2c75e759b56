from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

METADATA_SUFFIX = "-metadata.json"


def find_metadata_file(folder: Path) -> Path | None:
    """Return the tag file for ``folder``, or None.

    Only the folder's own entries are considered. When several files end
    in ``-metadata.json`` the first by file name wins, so the choice does
    not depend on directory enumeration order.
    """
    with os.scandir(folder) as it:
        names = sorted(e.name for e in it if e.is_file() and e.name.endswith(METADATA_SUFFIX))
    if not names:
        return None
    if len(names) > 1:
        logger.debug("Multiple metadata files in %s, using %s", folder, names[0])
    return folder / names[0]


def parse_tags(raw: str) -> tuple[str, ...]:
    data = json.loads(raw)
    if data is None:
        return ()
    if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
        raise ValueError("metadata must be a JSON array of strings")
    return tuple(data)


def read_folder_tags(folder: Path) -> tuple[str, ...]:
    """Read the folder's tags; an absent or unreadable tag file yields ()."""
    try:
        path = find_metadata_file(folder)
    except OSError as exc:
        logger.warning("Could not list metadata files in %s: %s", folder, exc)
        return ()
    if path is None:
        logger.debug("No metadata file ending with '%s' in %s", METADATA_SUFFIX, folder)
        return ()

    try:
        tags = parse_tags(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        logger.warning("Failed to parse metadata for folder %s from %s: %s", folder.name, path.name, exc)
        return ()
    logger.debug("Parsed %d tags for %s from %s", len(tags), folder.name, path.name)
    return tags
