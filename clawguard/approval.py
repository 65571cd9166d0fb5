"""Human approval workflow over a messaging capability.

The workflow posts an approval request, attaches approve/deny reactions as
affordances, then polls the reactions until a human decides or the deadline
passes. Every outcome other than an explicit approval denies the action.

States:
    INIT -> PROMPTED -> POLLING -> RESOLVED
                                -> TIMED_OUT
    any step failure             -> FAILED

Each step returns either its value or a Fault. The single handler in
``ApprovalWorkflow.run`` turns a Fault into a FAILED result, so nothing a
messaging capability raises ever reaches the caller.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from .formatting import APPROVE_SYMBOL, DENY_SYMBOL, DEFAULT_TIMEOUT_MS
from .messaging import MessagingCapability, Reaction

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 1000

TIMEOUT_NOTICE = "⏱️ Approval request timed out. Denying action for safety."


class ApprovalDecision(Enum):
    """Terminal outcome of one approval workflow run."""
    APPROVED = "approved"
    DENIED = "denied"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class WorkflowState(Enum):
    INIT = "init"
    PROMPTED = "prompted"
    POLLING = "polling"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class ApprovalRequest:
    message: str
    channel_id: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True)
class Fault:
    """A workflow step that could not complete."""
    stage: str
    reason: str


@dataclass(frozen=True)
class ApprovalResult:
    decision: ApprovalDecision
    reason: str = ""
    fault: Optional[Fault] = None
    polls: int = 0

    @property
    def approved(self) -> bool:
        return self.decision == ApprovalDecision.APPROVED

    @property
    def effective_decision(self) -> ApprovalDecision:
        """Decision as seen by the gate: timeouts and failures are denials."""
        if self.approved:
            return ApprovalDecision.APPROVED
        return ApprovalDecision.DENIED


class Ticker:
    """Fixed-interval ticker with a hard deadline.

    Clock and sleep are injectable so tests can drive time explicitly.
    """

    def __init__(
        self,
        interval_seconds: float,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._interval = interval_seconds
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._started_at = 0.0
        self._deadline = 0.0

    def start(self, timeout_seconds: float) -> None:
        self._started_at = self._clock()
        self._deadline = self._started_at + timeout_seconds

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def expired(self) -> bool:
        return self._clock() >= self._deadline

    def wait(self) -> None:
        self._sleep(self._interval)


class ApprovalWorkflow:
    """Runs the send/react/poll/timeout protocol for one approval request.

    A workflow instance owns its request state exclusively; create one per
    request.
    """

    def __init__(
        self,
        messaging: MessagingCapability,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        approve_symbol: str = APPROVE_SYMBOL,
        deny_symbol: str = DENY_SYMBOL,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._messaging = messaging
        self._approve_symbol = approve_symbol
        self._deny_symbol = deny_symbol
        self._ticker = Ticker(poll_interval_ms / 1000, clock=clock, sleep=sleep)
        self.state = WorkflowState.INIT
        self._sent: List[str] = []

    def run(self, request: ApprovalRequest) -> ApprovalResult:
        """Execute the protocol and return its terminal result. Never raises."""
        try:
            outcome = self._execute(request)
        except Exception as e:
            outcome = Fault(stage=self.state.value, reason=str(e) or type(e).__name__)
        finally:
            self._release()

        if isinstance(outcome, Fault):
            self.state = WorkflowState.FAILED
            logger.error("ClawGuard approval error during %s: %s", outcome.stage, outcome.reason)
            return ApprovalResult(
                decision=ApprovalDecision.FAILED,
                reason=f"Approval failed during {outcome.stage}: {outcome.reason}",
                fault=outcome,
            )

        return outcome

    def _call(self, stage: str, func: Callable[..., Any], *args: Any) -> Any:
        """Invoke a messaging operation, converting any exception to a Fault."""
        try:
            return func(*args)
        except Exception as e:
            return Fault(stage=stage, reason=str(e) or type(e).__name__)

    def _execute(self, request: ApprovalRequest) -> Union[ApprovalResult, Fault]:
        self.state = WorkflowState.INIT
        message_id = self._call("send", self._messaging.send, request.channel_id, request.message)
        if isinstance(message_id, Fault):
            return message_id
        if not message_id:
            return Fault(stage="send", reason="no message identifier returned")
        self._sent.append(message_id)

        for symbol in (self._approve_symbol, self._deny_symbol):
            ack = self._call("react", self._messaging.react, message_id, symbol)
            if isinstance(ack, Fault):
                return ack
            if not ack:
                logger.warning("Could not attach %s reaction to message %s", symbol, message_id)
        self.state = WorkflowState.PROMPTED

        return self._poll(request, message_id)

    def _poll(self, request: ApprovalRequest, message_id: str) -> Union[ApprovalResult, Fault]:
        self.state = WorkflowState.POLLING
        self._ticker.start(request.timeout_ms / 1000)
        polls = 0

        while not self._ticker.expired():
            reactions = self._call("poll", self._messaging.list_reactions, message_id)
            if isinstance(reactions, Fault):
                return reactions
            polls += 1

            decision = self._decide(reactions or [])
            if decision is not None:
                self.state = WorkflowState.RESOLVED
                logger.debug("Approval resolved %s after %d polls", decision.value, polls)
                reason = "User approved" if decision == ApprovalDecision.APPROVED else "User denied"
                return ApprovalResult(decision=decision, reason=reason, polls=polls)

            self._ticker.wait()

        return self._time_out(request, polls)

    def _decide(self, reactions: List[Reaction]) -> Optional[ApprovalDecision]:
        """Approve wins over deny when both are present in the same poll."""
        if self._has_users(reactions, self._approve_symbol):
            return ApprovalDecision.APPROVED
        if self._has_users(reactions, self._deny_symbol):
            return ApprovalDecision.DENIED
        return None

    @staticmethod
    def _has_users(reactions: List[Reaction], symbol: str) -> bool:
        return any(r.symbol == symbol and r.user_count > 0 for r in reactions)

    def _time_out(self, request: ApprovalRequest, polls: int) -> ApprovalResult:
        self.state = WorkflowState.TIMED_OUT
        notice = self._call("timeout notice", self._messaging.send, request.channel_id, TIMEOUT_NOTICE)
        if isinstance(notice, Fault):
            logger.warning("Could not send timeout notice: %s", notice.reason)
        elif notice:
            self._sent.append(notice)

        seconds = request.timeout_ms // 1000
        return ApprovalResult(
            decision=ApprovalDecision.TIMED_OUT,
            reason=f"No response within {seconds}s",
            polls=polls,
        )

    def _release(self) -> None:
        """Let the capability forget every message this run sent."""
        while self._sent:
            message_id = self._sent.pop()
            release = self._call("release", self._messaging.release, message_id)
            if isinstance(release, Fault):
                logger.debug("Could not release message %s: %s", message_id, release.reason)
