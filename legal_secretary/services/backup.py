"""
Backup file export and import.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from legal_secretary.config import log_event, BACKUP_FILENAME_PREFIX
from legal_secretary.errors import BackupImportError, BackupParseError
from legal_secretary.models import now_ms

INVALID_FILE_MESSAGE = "File không hợp lệ hoặc bị hỏng."
INVALID_JSON_MESSAGE = "Lỗi khi đọc file JSON."
UNREADABLE_FILE_MESSAGE = "Lỗi đọc file."


@dataclass
class BackupFile:
    """A downloadable backup document."""
    filename: str
    content: str
    mimetype: str = "application/json"


def backup_filename(version: str) -> str:
    return f"{BACKUP_FILENAME_PREFIX}{version}.json"


def export_data(templates: List[Dict[str, Any]], version: str) -> BackupFile:
    """Serialize the whole library as pretty-printed JSON."""
    data = {
        "version": version,
        "templates": templates,
        "exportedAt": now_ms(),
    }
    content = json.dumps(data, ensure_ascii=False, indent=2)
    log_event(logging.INFO, "backup_exported", version=version, templates=len(templates), bytes=len(content))
    return BackupFile(filename=backup_filename(version), content=content)


def parse_import_data(raw: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse a backup file.

    Only the presence of a ``templates`` array and a ``version`` is checked;
    individual template entries are taken as they are.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise BackupParseError(UNREADABLE_FILE_MESSAGE) from e

    try:
        data = json.loads(raw)
    except ValueError as e:
        log_event(logging.WARNING, "backup_invalid_json", error=str(e))
        raise BackupParseError(INVALID_JSON_MESSAGE) from e

    if not isinstance(data, dict) or not isinstance(data.get("templates"), list) or not data.get("version"):
        log_event(logging.WARNING, "backup_invalid_shape")
        raise BackupImportError(INVALID_FILE_MESSAGE)

    log_event(logging.INFO, "backup_parsed", version=data["version"], templates=len(data["templates"]))
    return {"templates": data["templates"], "version": str(data["version"])}
