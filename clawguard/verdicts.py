"""Verdict types exchanged between the gate, the risk assessor and the host.

A ThreatVerdict is what the risk assessor returns for one piece of content.
A GateVerdict is the single value handed back to the host runtime for one
action request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .extraction import ActionableItem, ContentKind


class ExitCode(Enum):
    """Risk classification produced by the assessor."""
    ALLOW = 0
    WARN = 1
    BLOCK = 2


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Threat:
    """Primary threat attached to a WARN or BLOCK verdict."""

    id: str
    name: str
    severity: Union[Severity, str] = Severity.MEDIUM
    teaching_prompt: Optional[str] = None

    @property
    def severity_label(self) -> str:
        if isinstance(self.severity, Severity):
            return self.severity.value
        return str(self.severity)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Threat':
        """Create from the assessor's JSON shape.

        Unknown severities are kept verbatim so they can still be displayed.
        """
        raw_severity = str(data.get("severity", "medium"))
        try:
            severity: Union[Severity, str] = Severity(raw_severity.lower())
        except ValueError:
            severity = raw_severity

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            severity=severity,
            teaching_prompt=data.get("teaching_prompt") or data.get("teachingPrompt"),
        )


@dataclass(frozen=True)
class ThreatVerdict:
    """Closed union over ALLOW / WARN / BLOCK.

    Only WARN and BLOCK may carry a primary threat. Use the ``allow``,
    ``warn`` and ``block`` constructors rather than the raw initializer.
    """

    exit_code: ExitCode
    message: str = ""
    primary_threat: Optional[Threat] = None

    def __post_init__(self):
        if self.exit_code == ExitCode.ALLOW and self.primary_threat is not None:
            raise ValueError("ALLOW verdicts cannot carry a threat")

    @classmethod
    def allow(cls, message: str = "") -> 'ThreatVerdict':
        return cls(ExitCode.ALLOW, message)

    @classmethod
    def warn(cls, message: str = "", threat: Optional[Threat] = None) -> 'ThreatVerdict':
        return cls(ExitCode.WARN, message, threat)

    @classmethod
    def block(cls, message: str = "", threat: Optional[Threat] = None) -> 'ThreatVerdict':
        return cls(ExitCode.BLOCK, message, threat)

    @property
    def threat_name(self) -> str:
        """Name of the primary threat, or a generic label."""
        if self.primary_threat and self.primary_threat.name:
            return self.primary_threat.name
        return "Unknown threat"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ThreatVerdict':
        """Create from the assessor's JSON shape.

        Unrecognized exit codes are treated as BLOCK.
        """
        raw_code = data.get("exitCode", data.get("exit_code", ExitCode.BLOCK.value))
        try:
            exit_code = ExitCode(int(raw_code))
        except (TypeError, ValueError):
            exit_code = ExitCode.BLOCK

        threat_data = data.get("primaryThreat") or data.get("primary_threat")
        threat = None
        if exit_code != ExitCode.ALLOW and isinstance(threat_data, dict):
            threat = Threat.from_dict(threat_data)

        return cls(
            exit_code=exit_code,
            message=str(data.get("message", "")),
            primary_threat=threat,
        )


@dataclass(frozen=True)
class GateVerdict:
    """Final decision for one action request."""

    allowed: bool
    reason: str = ""

    @classmethod
    def allow(cls, reason: str = "") -> 'GateVerdict':
        return cls(True, reason)

    @classmethod
    def block(cls, reason: str) -> 'GateVerdict':
        return cls(False, reason)

    def to_dict(self) -> Dict[str, Any]:
        """Render in the shape the host runtime expects."""
        if self.allowed:
            return {"allow": True}
        return {"block": True, "reason": self.reason}


class RiskAssessor(ABC):
    """Boundary to the external risk-assessment engine.

    Implementations classify a command or URL. How they do it is outside
    this package.
    """

    @abstractmethod
    def check_command(self, command: str) -> ThreatVerdict:
        ...

    @abstractmethod
    def check_url(self, url: str) -> ThreatVerdict:
        ...

    def assess(self, item: ActionableItem) -> ThreatVerdict:
        """Dispatch an extracted item to the matching check."""
        if item.kind == ContentKind.COMMAND:
            return self.check_command(item.value)
        if item.kind == ContentKind.URL:
            return self.check_url(item.value)
        raise ValueError(f"Cannot assess content of kind: {item.kind.value}")
