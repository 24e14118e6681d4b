"""
AI operations: Gemini template analysis and document drafting.
"""

import json
import base64
import logging
from typing import Any, Dict, List, Optional

from legal_secretary.config import log_event, gemini_model
from legal_secretary.errors import AIServiceError, AIUnavailableError
from legal_secretary.models import DraftResult, OriginalFile, Template

NO_TEMPLATES_MESSAGE = "Vui lòng thêm ít nhất một mẫu văn bản trước khi soạn thảo."
SUPPLEMENTARY_HEADER = "[THÔNG TIN BỔ SUNG TỪ NGƯỜI DÙNG]:"

DRAFTING_SYSTEM_INSTRUCTION = """Bạn là AI Thư ký Soạn thảo Văn bản Chuyên nghiệp. Nhiệm vụ của bạn là soạn thảo văn bản dựa trên Template được cung cấp và dữ liệu đầu vào của người dùng.

QUY TẮC QUAN TRỌNG:
1. Không biến tấu lung tung khác mẫu trừ khi người dùng yêu cầu.
2. Luôn ưu tiên giữ nguyên phong cách văn bản gốc mà mẫu đã chỉ định.
3. Đảm bảo văn phong pháp lý chuẩn mực.
4. Nếu thiếu thông tin, liệt kê rõ trong trường 'missing_fields'.
5. Trả về kết quả dưới dạng JSON hợp lệ."""

TEMPLATE_ANALYSIS_INSTRUCTION = """Bạn là chuyên gia phân tích văn bản pháp lý. Nhiệm vụ của bạn là trích xuất cấu trúc từ văn bản mẫu do người dùng cung cấp (có thể là hình ảnh, PDF hoặc văn bản) để tạo thành một Template tái sử dụng.
Hãy xác định các trường thay đổi (placeholder) và bọc chúng bằng {{...}}."""

ANALYSIS_OUTPUT_FORMAT = """Return a JSON object with exactly these keys:
- "name": document type name (e.g. "Hợp đồng lao động")
- "category": document category (Hợp đồng, Biên bản, Quyết định...)
- "description": short description of the document's purpose
- "structure": the normalized template text with placeholders written as {{TÊN_TRƯỜNG}}
- "placeholders": list of placeholder names"""

DRAFT_OUTPUT_FORMAT = """Return a JSON object with exactly these keys:
- "status": "success" or "incomplete"
- "selected_template": name or ID of the template used
- "missing_fields": list of placeholders that could not be filled
- "document_text": the drafted document as plain text
- "document_html": HTML version formatted for legal display (using <p>, <strong>, etc.)
- "document_docx_base64": empty string
- "notes": list of {"location": ..., "comment": ...} review notes"""


# --- RESPONSE HANDLING ---

def _strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _generate_json(parts: List[Any], operation: str) -> Dict[str, Any]:
    if not gemini_model:
        log_event(logging.WARNING, "gemini_unavailable", operation=operation)
        raise AIUnavailableError("API Key not found")

    try:
        log_event(logging.INFO, "gemini_request", operation=operation)
        response = gemini_model.generate_content(
            parts,
            generation_config={"response_mime_type": "application/json"},
        )
        text = response.text
    except Exception as e:
        log_event(logging.ERROR, "gemini_error", operation=operation, error=str(e))
        raise AIServiceError(f"Gemini request failed: {e}") from e

    if not text or not text.strip():
        raise AIServiceError("No response from AI")
    try:
        data = json.loads(_strip_code_fences(text))
    except ValueError as e:
        log_event(logging.ERROR, "gemini_invalid_json", operation=operation, error=str(e))
        raise AIServiceError("AI response is not valid JSON") from e
    if not isinstance(data, dict):
        raise AIServiceError("AI response is not a JSON object")

    log_event(logging.INFO, "gemini_success", operation=operation)
    return data


# --- TEMPLATE ANALYSIS ---

def analyze_template(text: Optional[str] = None, inline_data: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Extract a reusable template from a sample document.

    inline_data: {"data": <base64>, "mime_type": ...} for images and PDFs.
    """
    if not text and not inline_data:
        raise ValueError("Nothing to analyze")

    parts: List[Any] = [f"{TEMPLATE_ANALYSIS_INSTRUCTION}\n\n{ANALYSIS_OUTPUT_FORMAT}"]
    if text:
        parts.append(f"Phân tích văn bản mẫu sau và tạo template:\n\n{text}")
    if inline_data:
        parts.append("Phân tích văn bản trong file đính kèm sau và tạo template:")
        parts.append({
            "mime_type": inline_data["mime_type"],
            "data": base64.b64decode(inline_data["data"]),
        })

    return _generate_json(parts, "analyze_template")


def build_template(analysis: Dict[str, Any], original_file: Optional[OriginalFile] = None) -> Template:
    """Turn an analysis result into a new template."""
    if not analysis.get("name") or not analysis.get("structure"):
        raise AIServiceError("Could not extract valid template structure.")
    return Template(
        name=analysis["name"],
        structure=analysis["structure"],
        category=analysis.get("category") or "General",
        description=analysis.get("description") or "Custom uploaded template",
        placeholders=list(analysis.get("placeholders") or []),
        original_file=original_file,
    )


# --- DRAFTING ---

def merge_supplementary_info(request: str, values: Dict[str, str]) -> str:
    """Append user-supplied values for missing fields to a drafting request."""
    lines = [f"- {key}: {str(value).strip()}" for key, value in values.items()
             if value is not None and str(value).strip()]
    if not lines:
        return request
    return f"{request}\n\n{SUPPLEMENTARY_HEADER}\n" + "\n".join(lines)


def templates_context(templates: List[Dict[str, Any]]) -> str:
    return "\n---\n".join(
        f"ID: {t.get('id', '')}\nNAME: {t.get('name', '')}\nSTRUCTURE: {t.get('structure', '')}"
        for t in templates
    )


def draft_document(request: str, templates: List[Dict[str, Any]]) -> DraftResult:
    """Pick the best template for a request and fill it in."""
    if not request or not request.strip():
        raise ValueError("Drafting request is empty")
    if not templates:
        raise AIServiceError(NO_TEMPLATES_MESSAGE)

    prompt = f"""{DRAFTING_SYSTEM_INSTRUCTION}

AVAILABLE TEMPLATES:
{templates_context(templates)}

USER REQUEST:
"{request}"

INSTRUCTIONS:
1. Select the most appropriate template from the list based on the user request. If none fit perfectly, pick the closest one or use general legal knowledge to adapt.
2. Fill the template using the information in the USER REQUEST.
3. If information is missing for a placeholder, list it in 'missing_fields'.
4. Create a clean HTML version suitable for display.

{DRAFT_OUTPUT_FORMAT}"""

    data = _generate_json([prompt], "draft_document")
    result = DraftResult.from_dict(data)
    log_event(logging.INFO, "document_drafted", status=result.status,
              template=result.selected_template, missing=len(result.missing_fields))
    return result
