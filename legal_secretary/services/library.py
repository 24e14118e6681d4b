"""
Template library coordinator.

Owns the in-memory template collection and its revision. Every mutation is
applied in memory first, mirrored to local storage right away, and pushed to
the remote store once the library has been quiet for the debounce window.
Configuring an endpoint pulls the remote copy, which replaces local state
without any merge.
"""

import copy
import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import httpx

from legal_secretary.config import log_event, SYNC_DEBOUNCE_SECONDS
from legal_secretary.errors import SyncError
from legal_secretary.models import CloudConfig, CloudData, Template
from legal_secretary.services.scheduler import ThreadScheduler
from legal_secretary.services.storage import TemplateStore
from legal_secretary.services.sync import fetch_cloud_data, save_cloud_data
from legal_secretary.services.versioning import increment_version


class SyncState:
    DISABLED = "disabled"
    IDLE = "idle"
    SYNCING = "syncing"


class TemplateLibrary:

    def __init__(
        self,
        store: TemplateStore,
        scheduler=None,
        http_client: Optional[httpx.Client] = None,
        debounce_seconds: float = SYNC_DEBOUNCE_SECONDS,
    ):
        self.store = store
        self.scheduler = scheduler or ThreadScheduler()
        self.http_client = http_client
        self.debounce_seconds = debounce_seconds

        state = store.load()
        self._templates: List[Dict[str, Any]] = state.templates
        self._version: str = state.version
        self._cloud_config: CloudConfig = state.cloud_config

        self._lock = threading.Lock()
        self._pending_save = None
        self._save_generation = 0
        self._syncs_in_flight = 0
        self.last_sync_time: Optional[datetime] = None
        self.last_error: Optional[str] = None

    # --- READ ACCESS ---

    def templates(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._templates)

    def get(self, template_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            found = next((t for t in self._templates if t.get("id") == template_id), None)
            return copy.deepcopy(found)

    @property
    def version(self) -> str:
        return self._version

    @property
    def cloud_config(self) -> CloudConfig:
        return copy.copy(self._cloud_config)

    @property
    def sync_state(self) -> str:
        if not self._cloud_config.enabled:
            return SyncState.DISABLED
        return SyncState.SYNCING if self._syncs_in_flight else SyncState.IDLE

    @property
    def has_pending_save(self) -> bool:
        return self._pending_save is not None

    def status(self) -> Dict[str, Any]:
        return {
            "state": self.sync_state,
            "endpoint_configured": self._cloud_config.enabled,
            "pending_save": self.has_pending_save,
            "last_sync_time": self.last_sync_time.isoformat() if self.last_sync_time else None,
            "last_error": self.last_error,
            "version": self._version,
            "templates": len(self._templates),
        }

    # --- LIFECYCLE ---

    def start(self):
        """Mirror the loaded state and pull the remote copy when an endpoint is set."""
        with self._lock:
            templates, version = copy.deepcopy(self._templates), self._version
        self.store.save_templates(templates)
        self.store.save_version(version)
        log_event(logging.INFO, "library_started", version=version, templates=len(templates),
                  sync=self.sync_state)
        if self._cloud_config.enabled:
            self.request_sync(fetch_only=True)

    def shutdown(self):
        self._cancel_pending_save()

    # --- MUTATIONS ---

    def add(self, template: Union[Template, Dict[str, Any]]) -> Dict[str, Any]:
        """Prepend a template and bump the revision."""
        record = template.to_dict() if isinstance(template, Template) else copy.deepcopy(dict(template))
        with self._lock:
            self._version = increment_version(self._version, self.store.storage)
            self._templates.insert(0, record)
            templates, version = copy.deepcopy(self._templates), self._version
        self.store.save_templates(templates)
        log_event(logging.INFO, "template_added", id=record.get("id"), name=record.get("name"), version=version)
        self._schedule_save()
        return copy.deepcopy(record)

    def delete(self, template_id: str) -> bool:
        """Remove a template by id and bump the revision. Returns True if one was removed."""
        with self._lock:
            remaining = [t for t in self._templates if t.get("id") != template_id]
            removed = len(remaining) != len(self._templates)
            self._version = increment_version(self._version, self.store.storage)
            self._templates = remaining
            templates, version = copy.deepcopy(self._templates), self._version
        self.store.save_templates(templates)
        log_event(logging.INFO, "template_deleted", id=template_id, removed=removed, version=version)
        self._schedule_save()
        return removed

    def replace(self, templates: List[Dict[str, Any]], version: str):
        """Overwrite the whole library, e.g. when restoring a backup."""
        with self._lock:
            self._templates = copy.deepcopy(templates)
            self._version = version
        self.store.save_templates(templates)
        self.store.save_version(version)
        log_event(logging.INFO, "library_replaced", version=version, templates=len(templates))
        self._schedule_save()

    def update_cloud_config(self, config: CloudConfig):
        """Persist new cloud settings and react to endpoint changes."""
        with self._lock:
            previous = self._cloud_config
            self._cloud_config = copy.copy(config)
        self.store.save_cloud_config(config)

        if not config.enabled:
            self._cancel_pending_save()
            log_event(logging.INFO, "sync_disabled")
            return

        endpoint_changed = previous.endpoint != config.endpoint
        log_event(logging.INFO, "cloud_config_updated", endpoint_changed=endpoint_changed,
                  has_key=bool(config.api_key))
        if endpoint_changed or previous.api_key != config.api_key:
            self.request_sync(fetch_only=True)
        if endpoint_changed and self.has_pending_save:
            self._schedule_save()

    # --- SYNC ---

    def request_sync(self, fetch_only: bool):
        """Run a sync cycle in the background."""
        name = "sync_fetch" if fetch_only else "sync_save"
        self.scheduler.submit(lambda: self.sync(fetch_only), name=name)

    def sync(self, fetch_only: bool) -> bool:
        """
        Run one sync cycle against the configured endpoint.

        Fetch-only cycles replace the local library with the remote one when it
        carries a template list. Save cycles push the current library. Failures
        are logged and recorded in ``last_error``; local state is left as is.
        """
        config = self.cloud_config
        if not config.enabled:
            return False

        with self._lock:
            self._syncs_in_flight += 1
        log_event(logging.INFO, "sync_start", mode="fetch" if fetch_only else "save")
        try:
            if fetch_only:
                data = fetch_cloud_data(config, client=self.http_client)
                if not (isinstance(data, dict) and isinstance(data.get("templates"), list)):
                    log_event(logging.WARNING, "sync_fetch_unrecognized_payload",
                              kind=type(data).__name__)
                    return False
                self._apply_remote(data)
            else:
                with self._lock:
                    snapshot = CloudData(version=self._version, templates=copy.deepcopy(self._templates))
                save_cloud_data(config, snapshot, client=self.http_client)

            self.last_sync_time = datetime.now()
            self.last_error = None
            log_event(logging.INFO, "sync_complete", mode="fetch" if fetch_only else "save")
            return True
        except SyncError as e:
            self.last_error = str(e)
            log_event(logging.ERROR, "sync_failed", mode="fetch" if fetch_only else "save",
                      status=e.status, error=str(e))
            return False
        finally:
            with self._lock:
                self._syncs_in_flight -= 1

    def _apply_remote(self, data: Dict[str, Any]):
        with self._lock:
            self._templates = copy.deepcopy(data["templates"])
            if data.get("version"):
                self._version = str(data["version"])
            templates, version = copy.deepcopy(self._templates), self._version
        self.store.save_templates(templates)
        self.store.save_version(version)
        log_event(logging.INFO, "sync_remote_applied", version=version, templates=len(templates))

    # --- DEBOUNCE ---

    def _schedule_save(self):
        if not self._cloud_config.enabled:
            return
        with self._lock:
            if self._pending_save is not None:
                self._pending_save.cancel()
            self._save_generation += 1
            generation = self._save_generation
            self._pending_save = self.scheduler.call_later(
                self.debounce_seconds,
                lambda: self._debounced_save(generation),
                name="debounced_save",
            )

    def _debounced_save(self, generation: int):
        with self._lock:
            if generation != self._save_generation:
                return
            self._pending_save = None
        self.sync(fetch_only=False)

    def _cancel_pending_save(self):
        with self._lock:
            if self._pending_save is not None:
                self._pending_save.cancel()
                self._pending_save = None
            self._save_generation += 1
