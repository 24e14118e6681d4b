"""Tests for Gemini-backed template analysis and drafting."""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest

from legal_secretary.errors import AIServiceError
from legal_secretary.models import OriginalFile
from legal_secretary.services.ai import (
    NO_TEMPLATES_MESSAGE,
    analyze_template,
    build_template,
    draft_document,
    merge_supplementary_info,
    templates_context,
)


def fake_model(payload):
    model = MagicMock()
    text = payload if isinstance(payload, str) else json.dumps(payload)
    model.generate_content.return_value = MagicMock(text=text)
    return model


ANALYSIS = {
    "name": "Biên bản họp",
    "category": "Biên bản",
    "description": "Biên bản cuộc họp",
    "structure": "BIÊN BẢN HỌP\nNgày: {{NGÀY}}",
    "placeholders": ["NGÀY"],
}

DRAFT = {
    "status": "incomplete",
    "selected_template": "tpl-contract",
    "missing_fields": ["BÊN_B"],
    "document_text": "HỢP ĐỒNG LAO ĐỘNG\nBên A: Công ty X",
    "document_html": "<p><strong>HỢP ĐỒNG LAO ĐỘNG</strong></p>",
    "document_docx_base64": "",
    "notes": [{"location": "Bên B", "comment": "Thiếu thông tin"}],
}


class TestAnalyzeTemplate:
    """Template extraction."""

    def test_text_sample(self):
        model = fake_model(ANALYSIS)
        with patch("legal_secretary.services.ai.gemini_model", model):
            result = analyze_template(text="BIÊN BẢN HỌP ngày 01/01/2024")

        assert result == ANALYSIS
        parts = model.generate_content.call_args[0][0]
        assert any("BIÊN BẢN HỌP ngày 01/01/2024" in p for p in parts if isinstance(p, str))
        config = model.generate_content.call_args[1]["generation_config"]
        assert config["response_mime_type"] == "application/json"

    def test_inline_file(self):
        model = fake_model(ANALYSIS)
        encoded = base64.b64encode(b"%PDF-1.4 sample").decode("ascii")
        with patch("legal_secretary.services.ai.gemini_model", model):
            analyze_template(inline_data={"data": encoded, "mime_type": "application/pdf"})

        parts = model.generate_content.call_args[0][0]
        blob = parts[-1]
        assert blob == {"mime_type": "application/pdf", "data": b"%PDF-1.4 sample"}

    def test_code_fenced_response(self):
        model = fake_model("```json\n" + json.dumps(ANALYSIS) + "\n```")
        with patch("legal_secretary.services.ai.gemini_model", model):
            assert analyze_template(text="x") == ANALYSIS

    def test_no_model(self):
        with patch("legal_secretary.services.ai.gemini_model", None):
            with pytest.raises(AIServiceError):
                analyze_template(text="x")

    def test_empty_response(self):
        with patch("legal_secretary.services.ai.gemini_model", fake_model("")):
            with pytest.raises(AIServiceError):
                analyze_template(text="x")

    def test_invalid_json(self):
        with patch("legal_secretary.services.ai.gemini_model", fake_model("not json")):
            with pytest.raises(AIServiceError):
                analyze_template(text="x")

    def test_model_exception(self):
        model = MagicMock()
        model.generate_content.side_effect = RuntimeError("quota exceeded")
        with patch("legal_secretary.services.ai.gemini_model", model):
            with pytest.raises(AIServiceError, match="quota exceeded"):
                analyze_template(text="x")

    def test_nothing_to_analyze(self):
        with pytest.raises(ValueError):
            analyze_template()


class TestBuildTemplate:

    def test_defaults(self):
        template = build_template({"name": "Đơn", "structure": "{{A}}"})
        assert template.category == "General"
        assert template.description == "Custom uploaded template"
        assert template.placeholders == []
        assert template.id
        assert template.created_at > 0

    def test_keeps_original_file(self):
        original = OriginalFile(name="mau.pdf", data="AAAA", mime_type="application/pdf")
        record = build_template(ANALYSIS, original_file=original).to_dict()
        assert record["originalFile"] == {"name": "mau.pdf", "data": "AAAA", "mimeType": "application/pdf"}
        assert record["placeholders"] == ["NGÀY"]

    def test_requires_name_and_structure(self):
        with pytest.raises(AIServiceError):
            build_template({"name": "Đơn"})


class TestDraftDocument:
    """Drafting requests."""

    def test_draft(self, sample_template):
        model = fake_model(DRAFT)
        with patch("legal_secretary.services.ai.gemini_model", model):
            result = draft_document("Soạn hợp đồng cho Công ty X", [sample_template])

        assert result.status == "incomplete"
        assert result.missing_fields == ["BÊN_B"]
        assert result.notes[0].comment == "Thiếu thông tin"
        prompt = model.generate_content.call_args[0][0][0]
        assert "ID: tpl-contract" in prompt
        assert "Soạn hợp đồng cho Công ty X" in prompt

    def test_requires_templates(self):
        with pytest.raises(AIServiceError) as exc:
            draft_document("Soạn đơn", [])
        assert str(exc.value) == NO_TEMPLATES_MESSAGE

    def test_templates_context(self, sample_template):
        other = dict(sample_template, id="tpl-2", name="Khác")
        context = templates_context([sample_template, other])
        assert context.count("\n---\n") == 1
        assert "NAME: Khác" in context


class TestSupplementaryInfo:

    def test_appends_non_blank_values(self):
        merged = merge_supplementary_info("Soạn đơn", {"TÊN": "An", "CHỨC_VỤ": "  ", "NGÀY": "01/01"})
        assert merged == "Soạn đơn\n\n[THÔNG TIN BỔ SUNG TỪ NGƯỜI DÙNG]:\n- TÊN: An\n- NGÀY: 01/01"

    def test_nothing_to_add(self):
        assert merge_supplementary_info("Soạn đơn", {"TÊN": ""}) == "Soạn đơn"
