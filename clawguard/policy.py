"""Gate decision policy.

Turns one action request into one GateVerdict. Each extracted item is
assessed in extraction order (command first, then URLs):

1. BLOCK -> block immediately
2. WARN  -> ask a human when approval is configured, otherwise allow
3. ALLOW -> continue

The first item that yields a block short-circuits the rest.
"""

import logging
from typing import Callable, Optional

from .approval import ApprovalRequest, ApprovalWorkflow
from .config_loader import DiscordConfig
from .extraction import ActionableItem, ActionRequest, ContentKind, extract_items
from .formatting import format_approval_message
from .messaging import MessagingCapability
from .verdicts import ExitCode, GateVerdict, RiskAssessor, ThreatVerdict

logger = logging.getLogger(__name__)

APPROVAL_DENIED_REASON = "Approval denied or timed out"

BLOCK_REASON_PREFIXES = {
    ContentKind.COMMAND: "Security threat detected",
    ContentKind.URL: "Malicious URL detected",
}

WorkflowFactory = Callable[[MessagingCapability, DiscordConfig], ApprovalWorkflow]


def default_workflow_factory(messaging: MessagingCapability, config: DiscordConfig) -> ApprovalWorkflow:
    return ApprovalWorkflow(messaging, poll_interval_ms=config.poll_interval_ms)


class GatePolicy:
    """Resolves action requests to allow or block.

    The policy holds only read-only configuration; every approval runs in
    a fresh ApprovalWorkflow, so concurrent evaluations share no state.
    """

    def __init__(
        self,
        assessor: RiskAssessor,
        discord: Optional[DiscordConfig] = None,
        workflow_factory: WorkflowFactory = default_workflow_factory,
    ):
        self._assessor = assessor
        self._discord = discord or DiscordConfig()
        self._workflow_factory = workflow_factory

    @property
    def approval_configured(self) -> bool:
        return self._discord.approval_configured

    def evaluate(
        self,
        action: ActionRequest,
        messaging: Optional[MessagingCapability] = None
    ) -> GateVerdict:
        """Evaluate an action request.

        Args:
            action: The request the host is about to execute
            messaging: Capability used for approval requests, if any

        Returns:
            GateVerdict; block unless every item resolves to allow.

        Raises:
            Whatever the risk assessor raises.
        """
        items = extract_items(action)
        if not items:
            return GateVerdict.allow("Nothing to check")

        for item in items:
            verdict = self._assessor.assess(item)
            blocked = self._resolve(item, verdict, messaging)
            if blocked is not None:
                return blocked

        return GateVerdict.allow("All checks passed")

    def _resolve(
        self,
        item: ActionableItem,
        verdict: ThreatVerdict,
        messaging: Optional[MessagingCapability]
    ) -> Optional[GateVerdict]:
        """Return a block verdict for the item, or None when it passes."""
        if verdict.exit_code == ExitCode.BLOCK:
            logger.warning("ClawGuard BLOCKED %s: %s", item.kind.value, verdict.message)
            if verdict.primary_threat:
                logger.warning(
                    "   Threat: %s (%s)", verdict.primary_threat.name, verdict.primary_threat.id
                )
            prefix = BLOCK_REASON_PREFIXES.get(item.kind, "Security threat detected")
            return GateVerdict.block(f"{prefix}: {verdict.threat_name}")

        if verdict.exit_code == ExitCode.WARN:
            if not self.approval_configured:
                logger.warning("ClawGuard WARNING: %s", verdict.message)
                logger.warning("   Discord approval not configured, allowing...")
                return None
            return self._request_approval(item, verdict, messaging)

        return None

    def _request_approval(
        self,
        item: ActionableItem,
        verdict: ThreatVerdict,
        messaging: Optional[MessagingCapability]
    ) -> Optional[GateVerdict]:
        if messaging is None:
            logger.error("ClawGuard: messaging not available, cannot request approval")
            return GateVerdict.block(APPROVAL_DENIED_REASON)

        logger.info("ClawGuard WARNING: requesting Discord approval for %s...", item.kind.value)
        request = ApprovalRequest(
            message=format_approval_message(
                item.value, item.kind, verdict.primary_threat, self._discord.timeout_ms
            ),
            channel_id=self._discord.channel_id,
            timeout_ms=self._discord.timeout_ms,
        )
        result = self._workflow_factory(messaging, self._discord).run(request)

        if not result.approved:
            logger.warning("ClawGuard: Discord approval %s (%s)", result.decision.value, result.reason)
            return GateVerdict.block(APPROVAL_DENIED_REASON)

        logger.info("ClawGuard: Discord approval granted")
        return None
