"""ClawGuard security gate for agent tool calls.

Every command and URL a tool call carries is checked by a risk assessor
before the host executes it. BLOCK verdicts stop the call; WARN verdicts are
sent to a Discord channel for a human to approve or deny with a reaction.
Anything ambiguous, failed or timed out is denied.
"""

# Plugin kind identifier for registry discovery
PLUGIN_KIND = "tool"

from .extraction import ActionRequest, ActionableItem, ContentKind, extract_items
from .verdicts import ExitCode, GateVerdict, RiskAssessor, Severity, Threat, ThreatVerdict
from .formatting import format_approval_message
from .messaging import (
    DiscordMessaging,
    HostMessaging,
    MessagingCapability,
    MessagingError,
    Reaction,
    create_messaging,
)
from .approval import ApprovalDecision, ApprovalRequest, ApprovalResult, ApprovalWorkflow
from .config_loader import ClawGuardConfig, ConfigValidationError, DiscordConfig, load_config, validate_config
from .policy import GatePolicy
from .plugin import AssessorLoadError, ClawGuardPlugin, create_plugin, load_assessor

__all__ = [
    # Extraction
    'ActionRequest',
    'ActionableItem',
    'ContentKind',
    'extract_items',
    # Verdicts
    'ExitCode',
    'GateVerdict',
    'RiskAssessor',
    'Severity',
    'Threat',
    'ThreatVerdict',
    # Formatting
    'format_approval_message',
    # Messaging
    'DiscordMessaging',
    'HostMessaging',
    'MessagingCapability',
    'MessagingError',
    'Reaction',
    'create_messaging',
    # Approval
    'ApprovalDecision',
    'ApprovalRequest',
    'ApprovalResult',
    'ApprovalWorkflow',
    # Config
    'ClawGuardConfig',
    'ConfigValidationError',
    'DiscordConfig',
    'load_config',
    'validate_config',
    # Policy and plugin
    'GatePolicy',
    'AssessorLoadError',
    'ClawGuardPlugin',
    'create_plugin',
    'load_assessor',
]
