"""Formatting of human-readable approval requests."""

from typing import Optional, Union

from .extraction import ContentKind
from .verdicts import Threat

APPROVE_SYMBOL = "✅"
DENY_SYMBOL = "❌"

DEFAULT_TIMEOUT_MS = 60000

INPUT_EXCERPT_LENGTH = 200
TEACHING_EXCERPT_LENGTH = 300

KIND_GLYPHS = {
    "url": "🔗",
    "command": "⚡",
    "skill": "🧩",
    "message": "💬",
}
FALLBACK_GLYPH = "🔍"


def _excerpt(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def format_approval_message(
    content: str,
    kind: Union[ContentKind, str],
    threat: Optional[Threat] = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> str:
    """Build the approval message posted to the messaging channel.

    Args:
        content: The command or URL awaiting approval.
        kind: Content kind; unrecognized kinds get a generic glyph.
        threat: Primary threat from the verdict, if any.
        timeout_ms: Approval timeout, shown in whole seconds.

    Returns:
        Markdown text ending with the reaction instructions.
    """
    kind_name = kind.value if isinstance(kind, ContentKind) else str(kind)
    glyph = KIND_GLYPHS.get(kind_name, FALLBACK_GLYPH)

    message = "⚠️ **ClawGuard Warning - Approval Required**\n\n"
    message += f"{glyph} **Type:** {kind_name.upper()}\n"
    message += f"**Input:** `{_excerpt(content, INPUT_EXCERPT_LENGTH)}`\n\n"

    if threat:
        message += f"**Threat Detected:** {threat.name}\n"
        message += f"**Severity:** {threat.severity_label.upper()}\n"
        message += f"**ID:** {threat.id}\n\n"

        if threat.teaching_prompt:
            message += "**Why this is flagged:**\n"
            message += f"{_excerpt(threat.teaching_prompt, TEACHING_EXCERPT_LENGTH)}\n\n"

    message += "**Do you want to proceed?**\n"
    message += (
        f"React with {APPROVE_SYMBOL} to approve or {DENY_SYMBOL} to deny "
        f"(timeout: {timeout_ms // 1000}s)"
    )
    return message
