"""Tests for notification templates and placeholder rendering."""

import pytest

from app.core.notifications.models import NotificationKind
from app.core.notifications.templates import (
    TEMPLATES,
    TOKEN_PATTERN,
    get_template,
    render,
)


class TestRender:
    """Test placeholder substitution."""

    def test_substitutes_known_tokens(self):
        """Test every occurrence of a known token is replaced."""
        result = render("Dr. {{doctorName}} at {{time}}, {{time}} sharp", {
            "doctorName": "Rao",
            "time": "10:00",
        })

        assert result == "Dr. Rao at 10:00, 10:00 sharp"

    def test_unknown_tokens_left_verbatim(self):
        """Test missing keys keep the literal token."""
        result = render("Hello {{patientName}}, see {{hospitalName}}", {"patientName": "Asha"})

        assert result == "Hello Asha, see {{hospitalName}}"

    def test_non_string_values_stringified(self):
        """Test numbers and booleans are rendered with str()."""
        result = render("Amount {{amount}} paid={{paid}}", {"amount": 1500, "paid": True})

        assert result == "Amount 1500 paid=True"

    def test_keys_are_case_sensitive(self):
        """Test tokens only match keys with the same case."""
        result = render("{{Name}} {{name}}", {"name": "Asha"})

        assert result == "{{Name}} Asha"

    def test_malformed_tokens_not_matched(self):
        """Test spaced or single-brace tokens are plain text."""
        text = "{{ name }} {name} {{na-me}}"

        assert render(text, {"name": "Asha", "na-me": "x"}) == text

    def test_non_ascii_tokens_not_matched(self):
        """Test only ASCII letters, digits and underscore form a token name."""
        text = "{{nomé}} {{名前}}"

        assert render(text, {"nomé": "Asha", "名前": "Asha"}) == text

    def test_render_is_idempotent(self):
        """Test rendering twice with the same data changes nothing more."""
        data = {"doctorName": "Rao"}
        once = render("Dr. {{doctorName}} {{date}}", data)

        assert render(once, data) == once

    def test_empty_data(self):
        """Test rendering with no data returns the template."""
        assert render("{{a}} and {{b}}", {}) == "{{a}} and {{b}}"


class TestTemplateRegistry:
    """Test the template table."""

    def test_every_kind_has_template(self):
        """Test all notification kinds are registered."""
        for kind in NotificationKind:
            assert get_template(kind) is not None, kind

    def test_templates_have_all_texts(self):
        """Test no template has an empty part."""
        for kind, template in TEMPLATES.items():
            assert template.sms_text, kind
            assert template.email_subject, kind
            assert template.email_body, kind
            assert template.whatsapp_text, kind

    def test_registry_is_read_only(self):
        """Test the exported mapping cannot be modified."""
        with pytest.raises(TypeError):
            TEMPLATES[NotificationKind.PASSWORD_RESET] = None

    def test_appointment_reminder_sms(self):
        """Test the reminder SMS renders doctor, date and time."""
        template = get_template(NotificationKind.APPOINTMENT_REMINDER)

        text = render(template.sms_text, {
            "doctorName": "Rao",
            "date": "2025-01-10",
            "time": "10:00",
        })

        assert "Dr. Rao" in text
        assert "2025-01-10" in text
        assert "10:00" in text

    def test_tokens_use_identifier_syntax(self):
        """Test every placeholder in the table is a plain identifier."""
        for template in TEMPLATES.values():
            for part in (template.sms_text, template.email_subject, template.email_body):
                for key in TOKEN_PATTERN.findall(part):
                    assert key.isidentifier()
