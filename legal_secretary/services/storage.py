"""
Local durable storage: a key/value file store and the template library mirror.
"""

import os
import re
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from legal_secretary.config import (
    log_event,
    DATA_DIR,
    TEMPLATES_KEY,
    VERSION_KEY,
    CLOUD_CONFIG_KEY,
)
from legal_secretary.errors import StorageError
from legal_secretary.models import AppState, CloudConfig
from legal_secretary.seed import initial_templates
from legal_secretary.services.versioning import get_stored_version

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalStorage:
    """String values stored one file per key, overwritten whole on every write."""

    def __init__(self, directory: Union[str, Path, None] = None):
        self.directory = Path(directory) if directory is not None else DATA_DIR

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / key

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        log_event(logging.DEBUG, "storage_item_written", key=key, bytes=len(value))

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e


class TemplateStore:
    """
    Mirrors the template library, its revision and the cloud settings to
    local storage. Writes never fail the caller: storage errors are logged
    and the in-memory state stays authoritative.
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    # --- LOAD ---

    def load(self) -> AppState:
        return AppState(
            templates=self.load_templates(),
            version=get_stored_version(self.storage),
            cloud_config=self.load_cloud_config(),
        )

    def load_templates(self) -> List[Dict[str, Any]]:
        raw = self._read(TEMPLATES_KEY)
        if raw:
            try:
                templates = json.loads(raw)
                if isinstance(templates, list):
                    log_event(logging.INFO, "templates_loaded", count=len(templates))
                    return templates
                log_event(logging.WARNING, "templates_not_a_list", kind=type(templates).__name__)
            except ValueError as e:
                log_event(logging.WARNING, "templates_unparsable", error=str(e))
        log_event(logging.INFO, "templates_seeded")
        return initial_templates()

    def load_cloud_config(self) -> CloudConfig:
        raw = self._read(CLOUD_CONFIG_KEY)
        if not raw:
            return CloudConfig()
        try:
            return CloudConfig.from_dict(json.loads(raw))
        except ValueError as e:
            log_event(logging.WARNING, "cloud_config_unparsable", error=str(e))
            return CloudConfig()

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.get_item(key)
        except StorageError as e:
            log_event(logging.ERROR, "storage_read_failed", key=key, error=str(e))
            return None

    # --- SAVE ---

    def save(self, state: AppState) -> None:
        self.save_templates(state.templates)
        self.save_version(state.version)
        self.save_cloud_config(state.cloud_config)

    def save_templates(self, templates: List[Dict[str, Any]]) -> bool:
        return self._write(TEMPLATES_KEY, json.dumps(templates, ensure_ascii=False))

    def save_version(self, version: str) -> bool:
        return self._write(VERSION_KEY, version)

    def save_cloud_config(self, config: CloudConfig) -> bool:
        return self._write(CLOUD_CONFIG_KEY, json.dumps(config.to_dict()))

    def _write(self, key: str, value: str) -> bool:
        """Write a value. Returns True on success."""
        try:
            self.storage.set_item(key, value)
            return True
        except StorageError as e:
            log_event(logging.ERROR, "storage_write_failed", key=key, error=str(e))
            return False
