"""
Flask routes for the Legal Secretary API.
"""

import base64
import logging
from dataclasses import asdict

from flask import Blueprint, Response, current_app, request, jsonify

from legal_secretary.config import log_event, gemini_model, BUILD_VERSION
from legal_secretary.errors import AIServiceError, AIUnavailableError, BackupImportError
from legal_secretary.models import CloudConfig, OriginalFile, Template
from legal_secretary.services.ai import (
    NO_TEMPLATES_MESSAGE,
    analyze_template,
    build_template,
    draft_document,
    merge_supplementary_info,
)
from legal_secretary.services.backup import export_data, parse_import_data
from legal_secretary.services.library import TemplateLibrary

UNSUPPORTED_FILE_MESSAGE = "Định dạng file không hỗ trợ. Vui lòng dùng: PDF, Ảnh, Text, HTML, Markdown."
SETTINGS_SAVED_MESSAGE = "Đã lưu cấu hình! Hệ thống sẽ tự động đồng bộ."
IMPORT_SUCCESS_MESSAGE = "Khôi phục dữ liệu thành công!"

# Create blueprint
api = Blueprint('api', __name__)


def get_library() -> TemplateLibrary:
    return current_app.extensions["template_library"]


def _mask(secret: str) -> str:
    if not secret:
        return ""
    if len(secret) <= 4:
        return "****"
    return "*" * max(len(secret) - 4, 4) + secret[-4:]


def _ai_error_response(e: AIServiceError):
    status = 503 if isinstance(e, AIUnavailableError) else 502
    return jsonify({"error": str(e)}), status


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _template_field_error(data):
    """Describe the first malformed optional field of a posted template, or None."""
    created_at = data.get('createdAt')
    if created_at is not None and (isinstance(created_at, bool) or not isinstance(created_at, int)):
        return "createdAt must be an integer timestamp in milliseconds"
    placeholders = data.get('placeholders')
    if placeholders is not None and (
            not isinstance(placeholders, list) or not all(isinstance(p, str) for p in placeholders)):
        return "placeholders must be a list of strings"
    original = data.get('originalFile')
    if original is not None and not isinstance(original, dict):
        return "originalFile must be an object"
    return None


# --- HEALTH ---

@api.route('/health')
def health():
    """Health check endpoint."""
    library = get_library()
    return jsonify({
        "status": "ok",
        "gemini_available": gemini_model is not None,
        "build_version": BUILD_VERSION,
        "data_version": library.version,
        "sync": library.status(),
    })


# --- TEMPLATE LIBRARY ---

@api.route('/api/templates', methods=['GET'])
def list_templates():
    library = get_library()
    return jsonify({"templates": library.templates(), "version": library.version})


@api.route('/api/templates', methods=['POST'])
def create_template():
    """Add a template supplied as JSON."""
    data = _json_body()
    if not data.get('name') or not data.get('structure'):
        return jsonify({"error": "Template name and structure are required"}), 400
    if not isinstance(data['name'], str) or not isinstance(data['structure'], str):
        return jsonify({"error": "Template name and structure must be strings"}), 400
    field_error = _template_field_error(data)
    if field_error:
        return jsonify({"error": field_error}), 400

    template = Template.from_dict(data)
    record = get_library().add(template)
    return jsonify({"template": record, "version": get_library().version}), 201


@api.route('/api/templates/<template_id>', methods=['DELETE'])
def delete_template(template_id):
    library = get_library()
    removed = library.delete(template_id)
    return jsonify({"removed": removed, "version": library.version})


@api.route('/api/templates/analyze', methods=['POST'])
def analyze():
    """Create a template from a text sample or an uploaded file."""
    text = None
    inline_data = None
    original_file = None

    if 'file' in request.files:
        upload = request.files['file']
        raw = upload.read()
        filename = upload.filename or "upload"
        mime_type = upload.mimetype or "application/octet-stream"
        encoded = base64.b64encode(raw).decode("ascii")
        original_file = OriginalFile(name=filename, data=encoded, mime_type=mime_type)
        log_event(logging.INFO, "api_analyze_file", filename=filename, mime_type=mime_type, bytes=len(raw))

        if mime_type.startswith('image/') or mime_type == 'application/pdf':
            inline_data = {"data": encoded, "mime_type": mime_type}
        elif mime_type in ('text/plain', 'text/html') or filename.lower().endswith('.md'):
            text = raw.decode('utf-8', errors='replace')
        else:
            return jsonify({"error": UNSUPPORTED_FILE_MESSAGE}), 415
    else:
        data = _json_body()
        text = data.get('text')
        text = text.strip() if isinstance(text, str) else ''
        if not text:
            return jsonify({"error": "No text provided"}), 400
        log_event(logging.INFO, "api_analyze_text", chars=len(text))

    try:
        analysis = analyze_template(text=text, inline_data=inline_data)
        template = build_template(analysis, original_file=original_file)
    except AIServiceError as e:
        return _ai_error_response(e)

    library = get_library()
    record = library.add(template)
    return jsonify({"template": record, "version": library.version}), 201


# --- DRAFTING ---

@api.route('/api/draft', methods=['POST'])
def draft():
    """Draft a document from a free-text request."""
    data = _json_body()
    text = data.get('request')
    text = text.strip() if isinstance(text, str) else ''
    if not text:
        return jsonify({"error": "No request provided"}), 400

    supplementary = data.get('supplementary') or {}
    if isinstance(supplementary, dict):
        text = merge_supplementary_info(text, supplementary)
    log_event(logging.INFO, "api_draft", chars=len(text))

    templates = get_library().templates()
    if not templates:
        return jsonify({"error": NO_TEMPLATES_MESSAGE}), 400

    try:
        result = draft_document(text, templates)
    except AIServiceError as e:
        return _ai_error_response(e)
    return jsonify(asdict(result))


# --- BACKUP ---

@api.route('/api/export')
def export_backup():
    """Download the library as a backup file."""
    library = get_library()
    backup = export_data(library.templates(), library.version)
    return Response(
        backup.content,
        mimetype=backup.mimetype,
        headers={"Content-Disposition": f"attachment; filename={backup.filename}"}
    )


@api.route('/api/import', methods=['POST'])
def import_backup():
    """Restore the library from a backup file. Nothing is applied on error."""
    if 'file' in request.files:
        raw = request.files['file'].read()
    else:
        raw = request.get_data()

    try:
        data = parse_import_data(raw)
    except BackupImportError as e:
        log_event(logging.WARNING, "api_import_rejected", error=str(e))
        return jsonify({"error": f"Lỗi khôi phục: {e}"}), 400

    library = get_library()
    library.replace(data["templates"], data["version"])
    return jsonify({
        "message": IMPORT_SUCCESS_MESSAGE,
        "version": library.version,
        "templates": len(data["templates"]),
    })


# --- CLOUD SETTINGS & SYNC ---

@api.route('/api/settings/cloud', methods=['GET'])
def get_cloud_settings():
    config = get_library().cloud_config
    return jsonify({
        "endpoint": config.endpoint,
        "apiKey": _mask(config.api_key),
        "enabled": config.enabled,
    })


@api.route('/api/settings/cloud', methods=['PUT'])
def save_cloud_settings():
    data = _json_body()
    config = CloudConfig.from_dict(data)
    get_library().update_cloud_config(config)
    return jsonify({"message": SETTINGS_SAVED_MESSAGE, "enabled": config.enabled})


@api.route('/api/sync/status')
def sync_status():
    return jsonify(get_library().status())


@api.route('/api/sync', methods=['POST'])
def sync_now():
    """Run a sync cycle immediately."""
    library = get_library()
    if not library.cloud_config.enabled:
        return jsonify({"error": "Cloud sync is not configured"}), 409

    fetch_only = _json_body().get('fetch_only', True)
    if not isinstance(fetch_only, bool):
        return jsonify({"error": "fetch_only must be a boolean"}), 400
    ok = library.sync(fetch_only=fetch_only)
    return jsonify({"ok": ok, **library.status()}), 200 if ok else 502
