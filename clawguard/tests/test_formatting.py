"""Tests for approval message formatting."""

from ..extraction import ContentKind
from ..formatting import format_approval_message
from ..verdicts import Severity, Threat


class TestFormatApprovalMessage:
    """Tests for format_approval_message."""

    def test_minimal_message(self):
        message = format_approval_message("ls -la", "command")
        assert message == (
            "⚠️ **ClawGuard Warning - Approval Required**\n\n"
            "⚡ **Type:** COMMAND\n"
            "**Input:** `ls -la`\n\n"
            "**Do you want to proceed?**\n"
            "React with ✅ to approve or ❌ to deny (timeout: 60s)"
        )

    def test_content_truncated_to_200(self):
        message = format_approval_message("a" * 250, "command", None)
        assert "**Input:** `" + "a" * 200 + "...`" in message
        assert "a" * 201 not in message

    def test_content_of_exactly_200_not_truncated(self):
        message = format_approval_message("b" * 200, "command")
        assert "`" + "b" * 200 + "`" in message
        assert "..." not in message

    def test_content_kind_enum(self):
        message = format_approval_message("https://x.test", ContentKind.URL)
        assert "🔗 **Type:** URL\n" in message

    def test_kind_glyphs(self):
        assert "🧩 **Type:** SKILL" in format_approval_message("x", "skill")
        assert "💬 **Type:** MESSAGE" in format_approval_message("x", "message")

    def test_unknown_kind_fallback_glyph(self):
        assert "🔍 **Type:** FILE" in format_approval_message("x", "file")

    def test_threat_details(self):
        threat = Threat(id="CMD-042", name="Reverse shell", severity=Severity.HIGH)
        message = format_approval_message("nc -e /bin/sh", "command", threat)
        assert (
            "**Threat Detected:** Reverse shell\n"
            "**Severity:** HIGH\n"
            "**ID:** CMD-042\n\n"
        ) in message
        assert "Why this is flagged" not in message

    def test_unknown_severity_rendered_upper(self):
        threat = Threat(id="X", name="Odd", severity="elevated")
        assert "**Severity:** ELEVATED" in format_approval_message("x", "command", threat)

    def test_teaching_prompt_truncated_to_300(self):
        threat = Threat(id="T1", name="t", severity=Severity.LOW, teaching_prompt="p" * 400)
        message = format_approval_message("x", "command", threat)
        assert "**Why this is flagged:**\n" + "p" * 300 + "...\n\n" in message
        assert "p" * 301 not in message

    def test_short_teaching_prompt(self):
        threat = Threat(id="T1", name="t", teaching_prompt="Pipes remote code into a shell.")
        message = format_approval_message("x", "command", threat)
        assert "**Why this is flagged:**\nPipes remote code into a shell.\n\n" in message

    def test_timeout_floored_to_seconds(self):
        message = format_approval_message("x", "command", timeout_ms=2999)
        assert message.endswith("(timeout: 2s)")

    def test_ends_with_call_to_action(self):
        threat = Threat(id="T1", name="t", teaching_prompt="why")
        message = format_approval_message("x", "url", threat, timeout_ms=120000)
        assert message.endswith(
            "**Do you want to proceed?**\n"
            "React with ✅ to approve or ❌ to deny (timeout: 120s)"
        )
