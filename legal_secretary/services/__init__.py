"""Services package for Legal Secretary."""

from legal_secretary.services.storage import (
    LocalStorage,
    TemplateStore,
)

from legal_secretary.services.versioning import (
    get_stored_version,
    increment_version,
)

from legal_secretary.services.codec import (
    compress,
    decompress,
)

from legal_secretary.services.sync import (
    attach_credential,
    normalize_response,
    fetch_cloud_data,
    save_cloud_data,
)

from legal_secretary.services.backup import (
    export_data,
    parse_import_data,
)

from legal_secretary.services.scheduler import ThreadScheduler

from legal_secretary.services.library import (
    SyncState,
    TemplateLibrary,
)

__all__ = [
    # Storage
    "LocalStorage",
    "TemplateStore",
    # Versioning
    "get_stored_version",
    "increment_version",
    # Codec
    "compress",
    "decompress",
    # Sync
    "attach_credential",
    "normalize_response",
    "fetch_cloud_data",
    "save_cloud_data",
    # Backup
    "export_data",
    "parse_import_data",
    # Coordination
    "ThreadScheduler",
    "SyncState",
    "TemplateLibrary",
]
