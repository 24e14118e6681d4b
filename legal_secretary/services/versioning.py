"""
Data revision counter for the template library.

Revisions look like ``major.minor.patch``. Incrementing rolls the patch over
into the minor component after 9, and the minor into the major after 9:

    1.0.9 -> 1.1.0
    1.9.9 -> 2.0.0
    9.9.9 -> 10.0.0
"""

import re
import logging
from typing import Optional, Tuple

from legal_secretary.config import log_event, VERSION_KEY, DEFAULT_VERSION, RESET_VERSION
from legal_secretary.errors import StorageError

# ASCII digits only: str.isdigit also accepts superscripts such as "²"
_COMPONENT = re.compile(r"[0-9]+\Z")


def get_stored_version(storage) -> str:
    """Read the persisted revision, falling back to the default."""
    try:
        stored = storage.get_item(VERSION_KEY)
    except StorageError as e:
        log_event(logging.ERROR, "version_read_failed", error=str(e))
        return DEFAULT_VERSION
    return stored.strip() if stored and stored.strip() else DEFAULT_VERSION


def parse_version(value: str) -> Optional[Tuple[int, int, int]]:
    """Split a revision into its three integer components, or None if malformed."""
    parts = str(value).strip().split(".")
    if len(parts) != 3 or not all(_COMPONENT.match(p) for p in parts):
        return None
    major, minor, patch = (int(p) for p in parts)
    return major, minor, patch


def increment_version(current: str, storage) -> str:
    """
    Return the next revision and persist it.

    A revision that does not parse is discarded and replaced by the reset
    value, which is persisted the same way.
    """
    parsed = parse_version(current)
    if parsed is None:
        log_event(logging.WARNING, "version_malformed_reset", current=current, reset=RESET_VERSION)
        _persist(storage, RESET_VERSION)
        return RESET_VERSION

    major, minor, patch = parsed
    patch += 1
    if patch > 9:
        patch = 0
        minor += 1
    if minor > 9:
        minor = 0
        major += 1

    new_version = f"{major}.{minor}.{patch}"
    _persist(storage, new_version)
    log_event(logging.DEBUG, "version_incremented", previous=current, version=new_version)
    return new_version


def _persist(storage, version: str):
    try:
        storage.set_item(VERSION_KEY, version)
    except StorageError as e:
        log_event(logging.ERROR, "version_write_failed", version=version, error=str(e))
