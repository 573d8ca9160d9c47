"""YAML save-file I/O for reminder records."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from tickminder.errors import SaveFormatError

DATA_DIR = Path.home() / ".tickminder"
SAVE_FILE = DATA_DIR / "reminders.yaml"
FORMAT_VERSION = 1

log = logging.getLogger(__name__)


def _atomic_write(filepath: Path, content: str) -> None:
    """Temp file + rename so a crash never leaves a half-written save."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        os.write(fd, content.encode())
    finally:
        os.close(fd)
    os.replace(tmp, filepath)


def write_records(filepath: Path, records: list[dict[str, Any]]) -> None:
    document = {"version": FORMAT_VERSION, "reminders": records}
    _atomic_write(filepath, yaml.safe_dump(document, sort_keys=False))


def read_records(filepath: Path) -> list[dict[str, Any]]:
    """Read reminder records; a missing file is an empty set.

    Raises SaveFormatError when the file exists but is not a reminder save.
    Individual non-mapping entries are skipped.
    """
    if not filepath.exists():
        return []
    try:
        document = yaml.safe_load(filepath.read_text())
    except yaml.YAMLError as exc:
        raise SaveFormatError(f"{filepath}: {exc}") from exc
    if document is None:
        return []
    if not isinstance(document, dict):
        raise SaveFormatError(f"{filepath}: top level is not a mapping")

    version = document.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        log.warning("Reading %s written by format version %s", filepath, version)

    entries = document.get("reminders") or []
    if not isinstance(entries, list):
        raise SaveFormatError(f"{filepath}: 'reminders' is not a list")
    records: list[dict[str, Any]] = []
    for entry in entries:
        if isinstance(entry, dict):
            records.append(entry)
        else:
            log.warning("Skipping corrupt reminder entry in %s", filepath)
    return records
