"""Tests for verdict types and the assessor boundary."""

import pytest

from ..extraction import ActionableItem, ContentKind
from ..verdicts import ExitCode, GateVerdict, Severity, Threat, ThreatVerdict
from .fakes import StaticAssessor


class TestThreat:
    """Tests for Threat."""

    def test_from_dict(self):
        threat = Threat.from_dict({
            "id": "URL-007",
            "name": "Phishing domain",
            "severity": "CRITICAL",
            "teaching_prompt": "Lookalike of a bank domain.",
        })
        assert threat.id == "URL-007"
        assert threat.severity == Severity.CRITICAL
        assert threat.teaching_prompt == "Lookalike of a bank domain."

    def test_from_dict_camel_case_prompt(self):
        threat = Threat.from_dict({"id": "a", "name": "b", "teachingPrompt": "why"})
        assert threat.teaching_prompt == "why"

    def test_unknown_severity_kept(self):
        threat = Threat.from_dict({"id": "a", "name": "b", "severity": "spicy"})
        assert threat.severity == "spicy"
        assert threat.severity_label == "spicy"


class TestThreatVerdict:
    """Tests for ThreatVerdict."""

    def test_constructors(self):
        threat = Threat(id="a", name="b")
        assert ThreatVerdict.allow().exit_code == ExitCode.ALLOW
        assert ThreatVerdict.warn("w", threat).primary_threat == threat
        assert ThreatVerdict.block("b").exit_code == ExitCode.BLOCK

    def test_allow_cannot_carry_threat(self):
        with pytest.raises(ValueError):
            ThreatVerdict(ExitCode.ALLOW, "", Threat(id="a", name="b"))

    def test_threat_name_fallback(self):
        assert ThreatVerdict.block("b").threat_name == "Unknown threat"
        assert ThreatVerdict.block("b", Threat(id="a", name="Fork bomb")).threat_name == "Fork bomb"

    def test_from_dict(self):
        verdict = ThreatVerdict.from_dict({
            "exitCode": 2,
            "message": "Blocked",
            "primaryThreat": {"id": "CMD-1", "name": "rm root", "severity": "high"},
        })
        assert verdict.exit_code == ExitCode.BLOCK
        assert verdict.primary_threat.name == "rm root"

    def test_from_dict_allow_drops_threat(self):
        verdict = ThreatVerdict.from_dict({"exitCode": 0, "primaryThreat": {"id": "x", "name": "y"}})
        assert verdict.exit_code == ExitCode.ALLOW
        assert verdict.primary_threat is None

    def test_from_dict_unknown_code_blocks(self):
        assert ThreatVerdict.from_dict({"exitCode": 9}).exit_code == ExitCode.BLOCK
        assert ThreatVerdict.from_dict({}).exit_code == ExitCode.BLOCK


class TestGateVerdict:
    """Tests for GateVerdict."""

    def test_allow_dict(self):
        assert GateVerdict.allow("fine").to_dict() == {"allow": True}

    def test_block_dict(self):
        assert GateVerdict.block("nope").to_dict() == {"block": True, "reason": "nope"}


class TestRiskAssessor:
    """Tests for RiskAssessor.assess dispatch."""

    def test_dispatches_by_kind(self):
        assessor = StaticAssessor({"ls": ThreatVerdict.warn("w")})
        assert assessor.assess(ActionableItem(ContentKind.COMMAND, "ls")).exit_code == ExitCode.WARN
        assert assessor.assess(ActionableItem(ContentKind.URL, "https://x.test")).exit_code == ExitCode.ALLOW
        assert assessor.checked == ["ls", "https://x.test"]

    def test_rejects_display_only_kinds(self):
        with pytest.raises(ValueError, match="skill"):
            StaticAssessor().assess(ActionableItem(ContentKind.SKILL, "x"))
