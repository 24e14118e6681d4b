"""Built-in template set used when local storage holds no library yet."""

import copy
from typing import Any, Dict, List

from legal_secretary.models import now_ms

_LEAVE_REQUEST_STRUCTURE = (
    "CỘNG HÒA XÃ HỘI CHỦ NGHĨA VIỆT NAM\n"
    "Độc lập - Tự do - Hạnh phúc\n\n"
    "ĐƠN XIN NGHỈ PHÉP\n\n"
    "Kính gửi: {{NGƯỜI_NHẬN/PHÒNG_BAN}}\n\n"
    "Tôi tên là: {{TÊN_NHÂN_VIÊN}}\n"
    "Chức vụ: {{CHỨC_VỤ}}\n"
    "Bộ phận: {{BỘ_PHẬN}}\n\n"
    "Tôi làm đơn này xin phép được nghỉ {{SỐ_NGÀY}} ngày, từ ngày {{NGÀY_BẮT_ĐẦU}} "
    "đến hết ngày {{NGÀY_KẾT_THÚC}}.\n\n"
    "Lý do nghỉ: {{LÝ_DO}}\n\n"
    "Tôi cam kết đã bàn giao công việc và giữ liên lạc trong trường hợp khẩn cấp.\n\n"
    "Trân trọng,\n"
    "{{NGÀY_KÝ}}\n"
    "{{TÊN_NHÂN_VIÊN}}"
)

INITIAL_TEMPLATES: List[Dict[str, Any]] = [
    {
        "id": "tpl-001",
        "name": "Đơn xin nghỉ phép",
        "category": "Hành chính",
        "description": "Mẫu đơn xin nghỉ phép chuẩn cho nhân viên văn phòng.",
        "structure": _LEAVE_REQUEST_STRUCTURE,
        "placeholders": ["NGƯỜI_NHẬN", "TÊN_NHÂN_VIÊN", "CHỨC_VỤ", "LÝ_DO", "SỐ_NGÀY"],
    }
]


def initial_templates() -> List[Dict[str, Any]]:
    """Fresh copy of the seed library, stamped with the current time."""
    templates = copy.deepcopy(INITIAL_TEMPLATES)
    created_at = now_ms()
    for template in templates:
        template["createdAt"] = created_at
    return templates
